"""
Synchronous RouterOS API client.

Features:
  - One request in flight per connection, replies read in order
  - MD5 challenge-response login (RouterOS < 6.43)
  - Plain-text single-step login (RouterOS >= 6.43, 7.x)
  - TLS support for port 8729
  - Idempotent close

The client never retries and never logs; errors go straight to the caller.
Timeouts belong to the socket handed to `Client` (see `dial`).
"""

import hashlib
import socket
import ssl
import threading
from dataclasses import dataclass, field
from typing import Optional

from .proto import ENCODING, Sentence, SentenceReader, SentenceWriter

API_PORT = 8728
API_PORT_TLS = 8729


# ─── Errors ───────────────────────────────────────────────────────────────────

class RouterOSError(Exception):
    """Base class for errors raised by the client."""


class DeviceError(RouterOSError):
    """
    Raised when the device answers with !trap or !fatal.

    For a !trap followed by !done the complete reply (rows read before and
    after the trap, plus the terminator) is kept in `reply`.
    """

    def __init__(self, sentence: Sentence, reply: Optional["Reply"] = None):
        message = sentence.get("message") or f"unknown error: {sentence}"
        super().__init__(f"from RouterOS device: {message}")
        self.sentence = sentence
        self.reply = reply
        self.category = sentence.get("category", "")

    @property
    def fatal(self) -> bool:
        return self.sentence.word == "!fatal"


class UnknownReplyError(RouterOSError):
    def __init__(self, sentence: Sentence):
        super().__init__(f"unknown RouterOS reply word: {sentence.word}")
        self.sentence = sentence


class LoginError(RouterOSError):
    pass


class ChallengeError(LoginError):
    pass


class ConnectionClosedError(RouterOSError):
    pass


# ─── Reply ────────────────────────────────────────────────────────────────────

@dataclass
class Reply:
    re: list[Sentence] = field(default_factory=list)
    done: Optional[Sentence] = None

    def __str__(self) -> str:
        lines = [str(s) for s in self.re]
        lines.append(str(self.done))
        return "\n".join(lines)


# ─── Client ───────────────────────────────────────────────────────────────────

class Client:
    """
    RouterOS API client over an already connected socket.

    Usage:
        client = dial("192.168.88.1", API_PORT, "admin", "secret")
        reply = client.run("/system/resource/print", "=.proplist=version")
        print(reply.re[0].get("version"))
        client.close()

    Callers must not share one client between threads without their own
    locking; use one client per device.
    """

    def __init__(self, sock):
        self._sock = sock
        self._rfile = sock.makefile("rb")
        self._reader = SentenceReader(self._rfile)
        self._writer = SentenceWriter(sock)
        self._lock = threading.Lock()
        self._closed = False

    # ─── Connection ───────────────────────────────────────────────────────────

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._rfile.close()
        self._sock.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # ─── Authentication ───────────────────────────────────────────────────────

    def login(self, username: str, password: str) -> None:
        reply = self.run("/login", f"=name={username}", f"=password={password}")

        ret = reply.done.get("ret") if reply.done is not None else None
        if ret is None:
            # post-6.43: one stage, cleartext, no challenge
            if reply.done is not None:
                return
            raise LoginError("RouterOS: /login: no ret (challenge) received")

        # pre-6.43: two stages with challenge
        try:
            challenge = bytes.fromhex(ret)
        except ValueError as e:
            raise ChallengeError(
                f"RouterOS: /login: invalid ret (challenge) hex string received: {e}"
            ) from e

        self.run("/login", f"=name={username}", f"=response={challenge_response(challenge, password)}")

    # ─── Command Execution ────────────────────────────────────────────────────

    def run(self, *words: str) -> Reply:
        """Send one sentence and wait for the complete reply."""
        return self.run_args(list(words))

    def run_args(self, words: list[str]) -> Reply:
        if self._closed:
            raise ConnectionClosedError("use of closed RouterOS connection")

        self._writer.begin_sentence()
        for word in words:
            self._writer.write_word(word)
        self._writer.end_sentence()

        return self._read_reply()

    def _read_reply(self) -> Reply:
        reply = Reply()
        trap: Optional[Sentence] = None

        while True:
            sen = self._reader.read_sentence()
            if sen.word == "!re":
                reply.re.append(sen)
            elif sen.word == "!done":
                reply.done = sen
                if trap is not None:
                    raise DeviceError(trap, reply)
                return reply
            elif sen.word == "!trap":
                trap = sen
            elif sen.word == "!fatal":
                raise DeviceError(sen)
            elif sen.word == "":
                # API docs say that empty sentences should be ignored
                continue
            else:
                raise UnknownReplyError(sen)


def challenge_response(challenge: bytes, password: str) -> str:
    """
    RouterOS MD5 login:
      "00" + hex( MD5( 0x00 + password_bytes + challenge_bytes ) )
    """
    h = hashlib.md5()
    h.update(b"\x00")
    h.update(password.encode(ENCODING))
    h.update(challenge)
    return "00" + h.hexdigest()


# ─── Dialing ──────────────────────────────────────────────────────────────────

def dial(address: str, port: int, username: str, password: str, timeout: float = 5.0) -> Client:
    """Connect over plain TCP and log in."""
    sock = socket.create_connection((address, port), timeout=timeout)
    return _login_or_close(sock, username, password)


def dial_tls(
    address: str,
    port: int,
    username: str,
    password: str,
    timeout: float = 5.0,
    insecure: bool = False,
) -> Client:
    """Connect over TLS and log in. `insecure` skips certificate verification."""
    ssl_ctx = ssl.create_default_context()
    if insecure:
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE

    raw = socket.create_connection((address, port), timeout=timeout)
    try:
        sock = ssl_ctx.wrap_socket(raw, server_hostname=address)
    except (OSError, ssl.SSLError):
        raw.close()
        raise
    return _login_or_close(sock, username, password)


def _login_or_close(sock, username: str, password: str) -> Client:
    client = Client(sock)
    try:
        client.login(username, password)
    except BaseException:
        client.close()
        raise
    return client
