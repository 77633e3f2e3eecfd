from __future__ import annotations

import logging

from .exceptions import InvalidHexDigitError, TruncatedEscapeError

CR = b"\r"[0]

# Maps the byte value of every hex digit to the nibble it encodes.
# int(..., 16) would also accept signs, underscores and whitespace.
HEX_VALUES = {c: int(chr(c), 16) for c in b"0123456789abcdefABCDEF"}


class PercentDecoder:
    """
    Reverses the escaping applied to names and values in an
    ``application/x-www-form-urlencoded`` body: ``+`` becomes a space and
    ``%XX`` becomes the byte with hex value ``XX``.

    Historically, carriage returns produced by an escape (``%0D``) have been
    dropped from the output to normalize line endings sent by some clients.
    This is still the default, but it corrupts binary values that really
    contain that byte, so it can be switched off with
    ``drop_carriage_return=False``.  Literal ``\\r`` bytes are never dropped.
    """

    def __init__(self, drop_carriage_return: bool = True) -> None:
        self.logger = logging.getLogger(__name__)
        self.drop_carriage_return = drop_carriage_return

    def decode(self, data: bytes, start: int = 0, end: int | None = None) -> bytes:
        """
        Decode ``data[start:end]`` and return a new bytes object.

        Errors carry the offset of the offending ``%`` within ``data``.
        """
        if end is None:
            end = len(data)

        out = bytearray()
        i = start
        while i < end:
            pct = data.find(b"%", i, end)
            if pct == -1:
                pct = end

            # Everything up to the next escape is copied, with '+' as space.
            if pct > i:
                out += data[i:pct].replace(b"+", b" ")
            if pct == end:
                break

            if end - pct < 3:
                e = TruncatedEscapeError("Incomplete percent-escape at %d" % pct)
                e.offset = pct
                raise e

            hi = HEX_VALUES.get(data[pct + 1])
            lo = HEX_VALUES.get(data[pct + 2])
            if hi is None or lo is None:
                e = InvalidHexDigitError(
                    "Invalid hex digits %r in percent-escape at %d" % (data[pct + 1 : pct + 3], pct)
                )
                e.offset = pct
                raise e

            value = (hi << 4) | lo
            if value == CR and self.drop_carriage_return:
                self.logger.debug("Dropping escaped carriage return at %d", pct)
            else:
                out.append(value)

            i = pct + 3

        return bytes(out)

    def __repr__(self) -> str:
        return "%s(drop_carriage_return=%r)" % (self.__class__.__name__, self.drop_carriage_return)
