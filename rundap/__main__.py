"""``python -m rundap`` starts one run session.

Usage::

    python -m rundap --port 0 --log-level DEBUG

The bound port is printed on stdout as ``RUNDAP_PORT=<port>``.
"""

from rundap.adapter import main

if __name__ == "__main__":
    main()
