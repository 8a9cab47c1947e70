"""Debug Adapter Protocol message helpers."""

from rundap.protocol.protocol import ProtocolFactory
from rundap.protocol.protocol import ProtocolHandler

__all__ = ["ProtocolFactory", "ProtocolHandler"]
