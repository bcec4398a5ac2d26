"""
RouterOS API binary protocol: sentence encoding and decoding.

Wire format:
  Sentence = Word* + ZeroWord
  Word     = Length + Data
  ZeroWord = 0x00
  Length   = variable (1–5 bytes)

Word payloads are Windows-1250 text.

Word kinds inside a received sentence:
  !re / !done / !trap / !fatal  = control word (always first)
  .tag=<tag>                     = command tag
  =key=value / =key              = attribute
"""

import struct
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, Mapping

ENCODING = "cp1250"


class ProtocolError(Exception):
    """Malformed data received from the device."""


class InvalidSentenceWordError(ProtocolError):
    def __init__(self, word: bytes):
        super().__init__(f"invalid RouterOS sentence word: {word!r}")
        self.word = word


# ─── Sentence ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Sentence:
    word: str = ""
    tag: str = ""
    attrs: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.attrs.get(key, default)

    def __str__(self) -> str:
        return f"{self.word} @{self.tag} {list(self.attrs.items())}"


# ─── Length Encoding ──────────────────────────────────────────────────────────

def encode_length(length: int) -> bytes:
    if length < 0x80:
        return struct.pack("B", length)
    elif length < 0x4000:
        return struct.pack(">H", length | 0x8000)
    elif length < 0x200000:
        b = struct.pack(">I", length | 0xC00000)
        return b[1:]  # 3 bytes
    elif length < 0x10000000:
        return struct.pack(">I", length | 0xE0000000)
    else:
        return b"\xF0" + struct.pack(">I", length)


def encode_word(word: str) -> bytes:
    try:
        data = word.encode(ENCODING)
    except UnicodeEncodeError as e:
        raise ProtocolError(f"word can't be encoded as {ENCODING}: {e}") from e
    return encode_length(len(data)) + data


def build_sentence(words: list[str]) -> bytes:
    return b"".join(encode_word(w) for w in words) + b"\x00"


# ─── Writer ───────────────────────────────────────────────────────────────────

class SentenceWriter:
    """
    Buffers the words of one sentence and sends them with a single write.

    The stream needs a `sendall(bytes)` method (socket, ssl socket).
    """

    def __init__(self, stream):
        self._stream = stream
        self._buf: list[bytes] = []

    def begin_sentence(self) -> None:
        self._buf = []

    def write_word(self, word: str) -> None:
        self._buf.append(encode_word(word))

    def end_sentence(self) -> None:
        self._buf.append(b"\x00")
        data = b"".join(self._buf)
        self._buf = []
        self._stream.sendall(data)


# ─── Reader ───────────────────────────────────────────────────────────────────

class SentenceReader:
    """Reads sentences from a buffered binary stream (e.g. `sock.makefile("rb")`)."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def read_sentence(self) -> Sentence:
        word = ""
        tag = ""
        attrs: dict[str, str] = {}

        while True:
            raw = self._read_word()
            if not raw:
                return Sentence(word, tag, MappingProxyType(attrs))

            # Ex.: !re, !done
            if not word:
                word = raw.decode(ENCODING, errors="replace")
                continue

            if raw.startswith(b".tag="):
                tag = raw[5:].decode(ENCODING, errors="replace")
                continue

            # Ex.: =key=value, =key
            if raw[:1] == b"=":
                key, _, value = raw[1:].partition(b"=")
                attrs[key.decode(ENCODING, errors="replace")] = value.decode(ENCODING, errors="replace")
                continue

            raise InvalidSentenceWordError(raw)

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if data is None or len(data) < size:
            raise EOFError(f"unexpected end of stream: wanted {size} bytes, got {len(data or b'')}")
        return data

    def _read_number(self, size: int) -> int:
        num = 0
        for ch in self._read_exact(size):
            num = num << 8 | ch
        return num

    def read_length(self) -> int:
        b = self._read_number(1)
        if b & 0x80 == 0x00:
            return b
        elif b & 0xC0 == 0x80:
            return (b & 0x3F) << 8 | self._read_number(1)
        elif b & 0xE0 == 0xC0:
            return (b & 0x1F) << 16 | self._read_number(2)
        elif b & 0xF0 == 0xE0:
            return (b & 0x0F) << 24 | self._read_number(3)
        elif b & 0xF8 == 0xF0:
            return self._read_number(4)
        raise ProtocolError(f"invalid RouterOS word length prefix: {b:#04x}")

    def _read_word(self) -> bytes:
        length = self.read_length()
        if length == 0:
            return b""
        return self._read_exact(length)
