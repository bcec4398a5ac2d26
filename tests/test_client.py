"""Tests for the RouterOS API client against a scripted peer."""

import unittest

from routeros import (
    ChallengeError,
    Client,
    ConnectionClosedError,
    DeviceError,
    LoginError,
    ProtocolError,
    UnknownReplyError,
)
from routeros.client import challenge_response

from .fake_router import FakeRouter


class ClientTestCase(unittest.TestCase):

    def start(self, *replies) -> FakeRouter:
        self.router = FakeRouter(list(replies))
        self.client = Client(self.router.client_sock)
        self.router.start()
        self.addCleanup(self.client.close)
        return self.router

    def finish(self):
        self.client.close()
        self.router.join(timeout=5)


class TestLogin(ClientTestCase):

    def test_challenge_response_vector(self):
        self.assertEqual(
            challenge_response(bytes.fromhex("abc123"), "passTest"),
            "0021277bff9ac7caf06aa608e46616d47f",
        )

    def test_login_without_challenge(self):
        router = self.start([["!done"]])
        self.client.login("userTest", "passTest")
        self.finish()

        self.assertEqual(router.requests, [["/login", "=name=userTest", "=password=passTest"]])

    def test_login_with_challenge(self):
        router = self.start([["!done", "=ret=abc123"]], [["!done"]])
        self.client.login("userTest", "passTest")
        self.finish()

        self.assertEqual(router.requests[1], [
            "/login", "=name=userTest", "=response=0021277bff9ac7caf06aa608e46616d47f",
        ])

    def test_login_incorrect(self):
        self.start(
            [["!done", "=ret=abc123"]],
            [["!trap", "=message=incorrect login"], ["!done"]],
        )
        with self.assertRaises(DeviceError) as cm:
            self.client.login("userTest", "passTest")
        self.assertEqual(str(cm.exception), "from RouterOS device: incorrect login")

    def test_login_invalid_challenge(self):
        self.start([["!done", "=ret=Invalid Hex String"]])
        with self.assertRaises(ChallengeError) as cm:
            self.client.login("userTest", "passTest")
        self.assertIsInstance(cm.exception, LoginError)
        self.assertIn("invalid ret (challenge) hex string received", str(cm.exception))

    def test_password_outside_cp1250(self):
        router = self.start([["!done"]])
        with self.assertRaises(ProtocolError):
            self.client.login("userTest", "密码")
        # nothing was sent, the connection is still usable
        self.client.run("/system/identity/print")
        self.finish()
        self.assertEqual(router.requests, [["/system/identity/print"]])

    def test_login_peer_gone(self):
        self.start()
        self.router.join(timeout=5)
        with self.assertRaises((OSError, EOFError)):
            self.client.login("userTest", "passTest")


class TestRun(ClientTestCase):

    def test_run(self):
        router = self.start([["!re", "=address=1.2.3.4/32"], ["!done"]])
        reply = self.client.run("/ip/address/print", "?disabled=false")
        self.finish()

        self.assertEqual(router.requests, [["/ip/address/print", "?disabled=false"]])
        self.assertEqual(len(reply.re), 1)
        self.assertEqual(reply.re[0].get("address"), "1.2.3.4/32")
        self.assertEqual(reply.done.word, "!done")
        self.assertEqual(str(reply), "!re @ [('address', '1.2.3.4/32')]\n!done @ []")

    def test_empty_sentence_is_ignored(self):
        self.start([[], ["!re", "=address=1.2.3.4/32"], ["!done"]])
        reply = self.client.run("/ip/address/print")
        self.assertEqual([s.get("address") for s in reply.re], ["1.2.3.4/32"])

    def test_sequential_requests(self):
        self.start([["!re", "=name=a"], ["!done"]], [["!re", "=name=b"], ["!done"]])
        self.assertEqual(self.client.run("/one").re[0].get("name"), "a")
        self.assertEqual(self.client.run("/two").re[0].get("name"), "b")

    def test_eof(self):
        self.start()
        with self.assertRaises((EOFError, OSError)):
            self.client.run("/ip/address/print")

    def test_unknown_reply_word(self):
        self.start([["!xxx"]])
        with self.assertRaises(UnknownReplyError) as cm:
            self.client.run("/ip/address/print")
        self.assertEqual(str(cm.exception), "unknown RouterOS reply word: !xxx")

    def test_trap_keeps_reply(self):
        self.start([
            ["!re", "=name=a"],
            ["!trap", "=message=Some device error message", "=category=1"],
            ["!re", "=name=b"],
            ["!done"],
        ])
        with self.assertRaises(DeviceError) as cm:
            self.client.run("/ip/address/print")

        err = cm.exception
        self.assertEqual(str(err), "from RouterOS device: Some device error message")
        self.assertEqual(err.category, "1")
        self.assertFalse(err.fatal)
        self.assertEqual([s.get("name") for s in err.reply.re], ["a", "b"])
        self.assertEqual(err.reply.done.word, "!done")

    def test_last_trap_wins(self):
        self.start([["!trap", "=message=first"], ["!trap", "=message=second"], ["!done"]])
        with self.assertRaises(DeviceError) as cm:
            self.client.run("/x")
        self.assertEqual(str(cm.exception), "from RouterOS device: second")

    def test_trap_without_message(self):
        self.start([["!trap", "=category=2"], ["!done"]])
        with self.assertRaises(DeviceError) as cm:
            self.client.run("/x")
        self.assertEqual(
            str(cm.exception),
            "from RouterOS device: unknown error: !trap @ [('category', '2')]",
        )

    def test_fatal(self):
        self.start([["!fatal", "=message=session terminated"]])
        with self.assertRaises(DeviceError) as cm:
            self.client.run("/x")
        self.assertTrue(cm.exception.fatal)
        self.assertIsNone(cm.exception.reply)
        self.assertEqual(str(cm.exception), "from RouterOS device: session terminated")


class TestClose(ClientTestCase):

    def test_close_twice(self):
        self.start()
        self.client.close()
        self.client.close()
        self.assertTrue(self.client.closed)

    def test_run_after_close(self):
        self.start()
        self.client.close()
        with self.assertRaises(ConnectionClosedError):
            self.client.run("/x")


if __name__ == "__main__":
    unittest.main()
