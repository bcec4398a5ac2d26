"""RouterOS binary API client."""

from .client import (
    API_PORT,
    API_PORT_TLS,
    ChallengeError,
    Client,
    ConnectionClosedError,
    DeviceError,
    LoginError,
    Reply,
    RouterOSError,
    UnknownReplyError,
    dial,
    dial_tls,
)
from .proto import InvalidSentenceWordError, ProtocolError, Sentence

__all__ = [
    "API_PORT",
    "API_PORT_TLS",
    "ChallengeError",
    "Client",
    "ConnectionClosedError",
    "DeviceError",
    "InvalidSentenceWordError",
    "LoginError",
    "ProtocolError",
    "Reply",
    "RouterOSError",
    "Sentence",
    "UnknownReplyError",
    "dial",
    "dial_tls",
]
