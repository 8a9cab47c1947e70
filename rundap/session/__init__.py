"""Run session components: lifecycle, outbound channel, child process."""

from rundap.session.channel import EventChannel
from rundap.session.controller import RunSession
from rundap.session.controller import start_run_session
from rundap.session.lifecycle import SessionLifecycle
from rundap.session.lifecycle import SessionState
from rundap.session.lifecycle import SessionTransitionError
from rundap.session.process import ChildProcess

__all__ = [
    "ChildProcess",
    "EventChannel",
    "RunSession",
    "SessionLifecycle",
    "SessionState",
    "SessionTransitionError",
    "start_run_session",
]
