"""Tests for the RouterOS word/sentence codec."""

import unittest
from io import BytesIO
from unittest.mock import Mock

from routeros.proto import (
    InvalidSentenceWordError,
    ProtocolError,
    SentenceReader,
    SentenceWriter,
    build_sentence,
    encode_length,
    encode_word,
)

# length -> expected prefix, at each class boundary
LENGTHS = [
    (0x00, b"\x00"),
    (0x7F, b"\x7f"),
    (0x80, b"\x80\x80"),
    (0x3FFF, b"\xbf\xff"),
    (0x4000, b"\xc0\x40\x00"),
    (0x1FFFFF, b"\xdf\xff\xff"),
    (0x200000, b"\xe0\x20\x00\x00"),
    (0xFFFFFFF, b"\xef\xff\xff\xff"),
    (0x10000000, b"\xf0\x10\x00\x00\x00"),
]


def reader(data: bytes) -> SentenceReader:
    return SentenceReader(BytesIO(data))


class TestLength(unittest.TestCase):

    def test_encode_boundaries(self):
        for length, want in LENGTHS:
            with self.subTest(length=hex(length)):
                self.assertEqual(encode_length(length), want)

    def test_decode_boundaries(self):
        for length, prefix in LENGTHS:
            with self.subTest(length=hex(length)):
                self.assertEqual(reader(prefix).read_length(), length)

    def test_invalid_prefix(self):
        for first in (0xF8, 0xFC, 0xFF):
            with self.subTest(first=hex(first)):
                with self.assertRaises(ProtocolError):
                    reader(bytes([first, 0, 0, 0, 0])).read_length()

    def test_word_round_trip(self):
        # the 0x10000000 class is covered by the prefix checks above
        for length, prefix in LENGTHS[:7]:
            if length < 3:
                continue
            with self.subTest(length=hex(length)):
                word = "=v=" + "x" * (length - 3)
                data = build_sentence(["!re", word])
                self.assertEqual(data[4:4 + len(prefix)], prefix)

                sen = reader(data).read_sentence()
                self.assertEqual(sen.word, "!re")
                self.assertEqual(sen.get("v"), word[3:])

    def test_sentence_round_trip(self):
        words = ["!re", ".tag=42", "=name=ether1", "=comment=" + "y" * 0x4000, "=disabled=false"]
        sen = reader(build_sentence(words)).read_sentence()
        self.assertEqual(sen.tag, "42")
        self.assertEqual(dict(sen.attrs), {"name": "ether1", "comment": "y" * 0x4000, "disabled": "false"})

    def test_unencodable_word(self):
        with self.assertRaises(ProtocolError):
            encode_word("=password=パスワード")

    def test_truncated_length(self):
        with self.assertRaises(EOFError):
            reader(b"\xc0\x40").read_length()

    def test_encode_word_uses_cp1250(self):
        # 'Ž' is a single byte (0x8e) in Windows-1250
        self.assertEqual(encode_word("Ž"), b"\x01\x8e")


class TestSentenceReader(unittest.TestCase):

    def test_classifies_words(self):
        data = build_sentence(["!re", ".tag=7", "=name=ether1", "=comment", "=script=a=b"])
        sen = reader(data).read_sentence()

        self.assertEqual(sen.word, "!re")
        self.assertEqual(sen.tag, "7")
        self.assertEqual(dict(sen.attrs), {"name": "ether1", "comment": "", "script": "a=b"})

    def test_duplicate_key_overwrites(self):
        sen = reader(build_sentence(["!re", "=a=1", "=a=2"])).read_sentence()
        self.assertEqual(sen.get("a"), "2")

    def test_empty_sentence(self):
        sen = reader(b"\x00").read_sentence()
        self.assertEqual(sen.word, "")
        self.assertEqual(len(sen.attrs), 0)

    def test_invalid_word(self):
        with self.assertRaises(InvalidSentenceWordError) as cm:
            reader(build_sentence(["!re", "bogus"])).read_sentence()
        self.assertEqual(cm.exception.word, b"bogus")

    def test_non_ascii_value(self):
        sen = reader(build_sentence(["!re", "=comment=Žluťoučký"])).read_sentence()
        self.assertEqual(sen.get("comment"), "Žluťoučký")

    def test_consecutive_sentences(self):
        r = reader(build_sentence(["!re", "=a=1"]) + build_sentence(["!done"]))
        self.assertEqual(r.read_sentence().word, "!re")
        self.assertEqual(r.read_sentence().word, "!done")

    def test_eof_inside_sentence(self):
        data = build_sentence(["!re", "=name=ether1"])[:-4]
        with self.assertRaises(EOFError):
            reader(data).read_sentence()

    def test_attrs_are_read_only(self):
        sen = reader(build_sentence(["!re", "=a=1"])).read_sentence()
        with self.assertRaises(TypeError):
            sen.attrs["a"] = "2"

    def test_str(self):
        sen = reader(build_sentence(["!re", "=address=1.2.3.4/32"])).read_sentence()
        self.assertEqual(str(sen), "!re @ [('address', '1.2.3.4/32')]")


class TestSentenceWriter(unittest.TestCase):

    def test_single_write_per_sentence(self):
        stream = Mock()
        w = SentenceWriter(stream)
        w.begin_sentence()
        w.write_word("/ip/address/print")
        w.write_word("?disabled=false")
        w.end_sentence()

        stream.sendall.assert_called_once_with(
            build_sentence(["/ip/address/print", "?disabled=false"])
        )

    def test_empty_sentence(self):
        stream = Mock()
        w = SentenceWriter(stream)
        w.begin_sentence()
        w.end_sentence()
        stream.sendall.assert_called_once_with(b"\x00")

    def test_long_word_prefix(self):
        word = "=comment=" + "x" * 200
        self.assertEqual(encode_word(word)[:2], b"\x80\xd1")


if __name__ == "__main__":
    unittest.main()
