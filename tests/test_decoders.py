from __future__ import annotations

import unittest

from urlform.decoders import HEX_VALUES, PercentDecoder
from urlform.exceptions import DecodeError, InvalidHexDigitError, TruncatedEscapeError


class TestPercentDecoder(unittest.TestCase):
    def setUp(self) -> None:
        self.d = PercentDecoder()

    def test_plain(self) -> None:
        self.assertEqual(self.d.decode(b"foobar"), b"foobar")
        self.assertEqual(self.d.decode(b""), b"")

    def test_plus(self) -> None:
        self.assertEqual(self.d.decode(b"a+b++"), b"a b  ")

    def test_escapes(self) -> None:
        self.assertEqual(self.d.decode(b"%41%62%2B%25"), b"Ab+%")
        self.assertEqual(self.d.decode(b"%ff%FF%fF"), b"\xff\xff\xff")

    def test_escaped_plus_is_not_space(self) -> None:
        self.assertEqual(self.d.decode(b"va%2Blue"), b"va+lue")

    def test_range(self) -> None:
        data = b"xx=a+%41&yy"
        self.assertEqual(self.d.decode(data, 3, 8), b"a A")
        self.assertEqual(self.d.decode(data, 3, 3), b"")

    def test_range_bounds_escape(self) -> None:
        # The escape is complete in the buffer, but not inside the range.
        data = b"a=%41"
        with self.assertRaises(TruncatedEscapeError) as cm:
            self.d.decode(data, 2, 4)
        self.assertEqual(cm.exception.offset, 2)

    def test_truncated(self) -> None:
        for data in (b"%", b"%4", b"abc%", b"abc%4"):
            with self.assertRaises(TruncatedEscapeError) as cm:
                self.d.decode(data)
            self.assertEqual(cm.exception.offset, data.index(b"%"))

    def test_invalid_hex(self) -> None:
        for data in (b"%zz", b"%4g", b"%g4", b"%+1", b"%-1", b"% 1", b"%_1", b"x%%41"):
            with self.assertRaises(InvalidHexDigitError) as cm:
                self.d.decode(data)
            self.assertEqual(cm.exception.offset, data.index(b"%"))

    def test_errors_are_decode_errors(self) -> None:
        self.assertTrue(issubclass(TruncatedEscapeError, DecodeError))
        self.assertTrue(issubclass(InvalidHexDigitError, DecodeError))

    def test_carriage_return_dropped_by_default(self) -> None:
        self.assertEqual(self.d.decode(b"a%0D%0Ab%0d"), b"a\nb")

    def test_carriage_return_kept(self) -> None:
        d = PercentDecoder(drop_carriage_return=False)
        self.assertEqual(d.decode(b"a%0D%0Ab"), b"a\r\nb")

    def test_literal_carriage_return_kept(self) -> None:
        self.assertEqual(self.d.decode(b"a\rb"), b"a\rb")

    def test_all_bytes(self) -> None:
        d = PercentDecoder(drop_carriage_return=False)
        data = b"".join(b"%%%02X" % i for i in range(256))
        self.assertEqual(d.decode(data), bytes(range(256)))

    def test_hex_table(self) -> None:
        self.assertEqual(len(HEX_VALUES), 22)
        self.assertEqual(HEX_VALUES[ord("a")], 10)
        self.assertEqual(HEX_VALUES[ord("F")], 15)

    def test_repr(self) -> None:
        self.assertEqual(repr(self.d), "PercentDecoder(drop_carriage_return=True)")
