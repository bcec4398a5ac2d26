"""In-process RouterOS API peer for client tests."""

import socket
import threading

from routeros.proto import ENCODING, SentenceReader, build_sentence


class FakeRouter(threading.Thread):
    """
    Answers each request sentence with the next scripted reply.

    A reply is a list of sentences, a sentence a list of words. After the
    script is exhausted the router closes its end of the connection.
    """

    def __init__(self, replies: list[list[list[str]]]):
        super().__init__(daemon=True)
        self.client_sock, self.sock = socket.socketpair()
        self.replies = replies
        self.requests: list[list[str]] = []

    def run(self):
        rfile = self.sock.makefile("rb")
        reader = SentenceReader(rfile)
        try:
            for reply in self.replies:
                self.requests.append(self._read_request(reader, rfile))
                self.sock.sendall(b"".join(build_sentence(s) for s in reply))
        except (OSError, EOFError):
            pass
        finally:
            rfile.close()
            self.sock.close()

    @staticmethod
    def _read_request(reader: SentenceReader, rfile) -> list[str]:
        words = []
        while True:
            length = reader.read_length()
            if length == 0:
                return words
            words.append(rfile.read(length).decode(ENCODING))
