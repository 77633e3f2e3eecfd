"""
Helpers for sending a complete response through a response object.

The response object is supplied by the server and must be driven through
its protocol in order, exactly once per response::

    res.status(code, message)
    res.add_header(name, value)     # zero or more times
    res.add_length(length)
    res.done_headers()
    res.write_body(data)
    res.done()

Every helper checks what it can (status code, header names and values)
before calling ``status()``, so a bad argument never leaves a response half
sent.  Errors raised by the response object itself are not caught.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import FileError, InvalidHeaderError, UnknownStatusError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable
    from typing import Protocol

    class Response(Protocol):
        def status(self, code: int, message: str) -> None: ...
        def add_header(self, name: str, value: bytes) -> None: ...
        def add_length(self, length: int) -> None: ...
        def done_headers(self) -> None: ...
        def write_body(self, data: bytes) -> None: ...
        def done(self) -> None: ...


logger = logging.getLogger(__name__)

# fmt: off
STATUS_MESSAGES = MappingProxyType({
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    306: "Switch Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Payload Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
})

# Per RFC7230 3.2.6, a header name is a token.
TOKEN_CHARS_SET = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"abcdefghijklmnopqrstuvwxyz"
    b"0123456789"
    b"!#$%&'*+-.^_`|~")
# fmt: on

# Bytes that would end a header value early.
FORBIDDEN_VALUE_BYTES = frozenset(b"\r\n\x00")

TEXT_PLAIN = b"text/plain; charset=utf-8"
OCTET_STREAM = b"application/octet-stream; charset=utf-8"


def lookup_status(code: int) -> str:
    """Returns the reason phrase for ``code``, or raises UnknownStatusError."""
    try:
        return STATUS_MESSAGES[code]
    except KeyError:
        raise UnknownStatusError("Unknown status code: %r" % (code,)) from None


def _check_header(name: str, value: bytes) -> None:
    encoded = name.encode("latin-1", "replace")
    if not encoded or any(c not in TOKEN_CHARS_SET for c in encoded):
        raise InvalidHeaderError("Invalid header name: %r" % (name,))
    if any(c in FORBIDDEN_VALUE_BYTES for c in value):
        raise InvalidHeaderError("Invalid value for header %s: %r" % (name, value))


def send(
    res: Response, code: int, message: str, data: bytes, headers: Iterable[tuple[str, bytes]] = ()
) -> None:
    """
    Send a complete response.  All headers are validated before anything is
    written to ``res``.
    """
    headers = list(headers)
    for name, value in headers:
        _check_header(name, value)

    logger.debug("Sending %d %s with %d bytes of body", code, message, len(data))
    res.status(code, message)
    for name, value in headers:
        res.add_header(name, value)
    res.add_length(len(data))
    res.done_headers()
    res.write_body(data)
    res.done()


def redirect(res: Response, data: bytes, location: bytes, code: int) -> None:
    """
    Redirects ``res`` to ``location`` with status ``code``.  ``data`` should
    explain to the user what happened.
    """
    send(res, code, lookup_status(code), data, [("Location", location)])


def redirect_with_message(res: Response, data: bytes, location: bytes, code: int, message: str) -> None:
    """
    Like :func:`redirect`, but with a caller-supplied reason phrase.  This
    should only be used for nonstandard codes.
    """
    send(res, code, message, data, [("Location", location)])


def error(res: Response, data: bytes, code: int) -> None:
    """
    Sends an error such as a 404.  ``data`` should explain to the user what
    happened.
    """
    send(res, code, lookup_status(code), data)


def send_string(res: Response, data: bytes) -> None:
    send(res, 200, "OK", data)


def send_string_raw(res: Response, data: bytes) -> None:
    """Sends ``data`` as plain text."""
    send(res, 200, "OK", data, [("Content-Type", TEXT_PLAIN)])


def send_file(res: Response, filename: str) -> None:
    send(res, 200, "OK", read_file(filename))


def send_file_text(res: Response, filename: str) -> None:
    """Sends the contents of ``filename`` as plain text."""
    send(res, 200, "OK", read_file(filename), [("Content-Type", TEXT_PLAIN)])


def send_file_raw(res: Response, filename: str) -> None:
    """Sends the contents of ``filename`` for download."""
    send(res, 200, "OK", read_file(filename), [("Content-Type", OCTET_STREAM)])


def read_file(filename: str) -> bytes:
    """Reads all of ``filename`` into memory."""
    try:
        with open(filename, "rb") as f:
            return f.read()
    except OSError as e:
        logger.warning("Unable to read file %s: %s", filename, e)
        raise FileError("Unable to read file %s" % (filename,)) from e


def write_file(filename: str, data: bytes) -> None:
    try:
        with open(filename, "wb") as f:
            f.write(data)
    except OSError as e:
        logger.warning("Unable to write file %s: %s", filename, e)
        raise FileError("Unable to write file %s" % (filename,)) from e
