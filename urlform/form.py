from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from email.message import Message
from enum import IntEnum
from numbers import Number
from typing import TYPE_CHECKING, NamedTuple, cast

from .decoders import PercentDecoder
from .exceptions import BodyTooLargeError, FormParserError, InvalidFieldNameError, MissingSeparatorError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Iterator
    from typing import Any, Literal, Protocol, TypeAlias, TypedDict

    class SupportsRead(Protocol):
        def read(self, __n: int) -> bytes: ...

    class QuerystringCallbacks(TypedDict, total=False):
        on_field_start: Callable[[], None]
        on_field_name: Callable[[bytes, int, int], None]
        on_field_data: Callable[[bytes, int, int], None]
        on_field_end: Callable[[], None]
        on_end: Callable[[], None]

    class FormDecoderConfig(TypedDict, total=False):
        MAX_BODY_SIZE: float
        DROP_CARRIAGE_RETURN: bool

    CallbackName: TypeAlias = Literal["field_start", "field_name", "field_data", "field_end", "end"]


# Get logger for this module.
logger = logging.getLogger(__name__)


class QuerystringState(IntEnum):
    """Querystring parser states.

    The parser alternates between FIELD_NAME and FIELD_DATA once per field,
    and moves to END when the cursor reaches the end of the body.
    """

    FIELD_NAME = 0
    FIELD_DATA = 1
    END = 2


# Media types we know how to decode.
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "application/x-url-encoded")

# Charsets for which decoding names as UTF-8 is correct.
UTF8_CHARSETS = (b"utf-8", b"utf8", b"us-ascii", b"ascii")

PERCENT = b"%"[0]

# A field name ends at the first '=' and a value at the first '&'.  We also
# stop at '%' so that escape triples can be stepped over as a unit.
NAME_END_RE = re.compile(b"[%=]")
DATA_END_RE = re.compile(b"[%&]")


def _find_unescaped(pattern: re.Pattern[bytes], data: bytes, pos: int, end: int) -> int:
    """
    Return the position of the first delimiter matched by ``pattern`` in
    ``data[pos:end]`` that is not one of the two bytes following a '%', or -1.
    """
    while True:
        m = pattern.search(data, pos, end)
        if m is None:
            return -1
        pos = m.start()
        if data[pos] != PERCENT:
            return pos
        pos += 3


def parse_options_header(value: str | bytes | None) -> tuple[bytes, dict[bytes, bytes]]:
    """
    Parses a Content-Type header into a value in the following format:
        (content_type, {parameters})
    """
    if not value:
        return (b"", {})

    if isinstance(value, bytes):
        value = value.decode("latin-1")

    if ";" not in value:
        return (value.lower().strip().encode("latin-1"), {})

    message = Message()
    message["content-type"] = value
    params = message.get_params()
    assert params, "At least the content type value should be present"
    ctype = params.pop(0)[0].lower().encode("latin-1")
    options: dict[bytes, bytes] = {}
    for key, param in params:
        # RFC 2231 values come back as (charset, language, value).
        if isinstance(param, tuple):
            param = param[-1]
        options[key.encode("latin-1")] = param.encode("latin-1")
    return ctype, options


class Span(NamedTuple):
    """A range of offsets into an input buffer that has not been decoded yet."""

    start: int
    end: int

    def extract(self, data: bytes) -> bytes:
        return data[self.start : self.end]


class FormResult(Mapping[str, bytes]):
    """
    Immutable mapping of decoded field names to decoded values.

    Values are raw bytes, since form values are not required to be text.
    Compares equal to any other mapping holding the same items.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, bytes] | None = None) -> None:
        self._fields: dict[str, bytes] = dict(fields) if fields is not None else {}

    def __getitem__(self, key: str) -> bytes:
        return self._fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self._fields)


class BaseParser:
    """
    This class implements some helpful methods for parsers.  Currently, it
    just implements the callback logic in a central location.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)
        self.callbacks: QuerystringCallbacks = {}

    def callback(
        self, name: CallbackName, data: bytes | None = None, start: int | None = None, end: int | None = None
    ) -> None:
        """
        This function calls a provided callback with some data.  Unlike a
        streaming parser, empty ranges are still delivered: an empty name or
        value is a real field.
        """
        on_name = "on_" + name
        func = self.callbacks.get(on_name)
        if func is None:
            return
        func = cast("Callable[..., Any]", func)
        if data is not None:
            self.logger.debug("Calling %s with data[%d:%d]", on_name, start, end)
            func(data, start, end)
        else:
            self.logger.debug("Calling %s with no data", on_name)
            func()

    def set_callback(self, name: CallbackName, new_func: Callable[..., Any] | None) -> None:
        """
        Update the function for a callback.  Removes from the callbacks dict
        if new_func is None.
        """
        if new_func is None:
            self.callbacks.pop("on_" + name, None)  # type: ignore[misc]
        else:
            self.callbacks["on_" + name] = new_func  # type: ignore[literal-required]

    def __repr__(self) -> str:
        return "%s()" % self.__class__.__name__


class QuerystringParser(BaseParser):
    """
    This parser splits an ``application/x-www-form-urlencoded`` body into
    fields in a single left-to-right scan, and calls the callbacks given with
    the offsets of each raw name and value.

    Valid callbacks (* means with data):
        - on_field_start
        - on_field_name         *
        - on_field_data         *
        - on_field_end
        - on_end

    Each field is ``name=value``, and fields are joined by '&'.  A name runs
    up to the first '=' (so it may contain a literal '&'), and a value runs
    up to the next '&' or the end of the body.  A '%' and the two bytes after
    it are never treated as delimiters.  A name with no '=' after it is an
    error, and a single trailing '&' is ignored.
    """

    state: QuerystringState

    def __init__(self, callbacks: QuerystringCallbacks = {}, max_size: float = float("inf")) -> None:
        super().__init__()
        self.state = QuerystringState.FIELD_NAME
        self.callbacks = callbacks.copy()

        if not isinstance(max_size, Number) or max_size < 1:
            raise ValueError("max_size must be a positive number, not %r" % max_size)
        self.max_size: int | float = max_size

    def parse(self, data: bytes) -> int:
        """
        Scan the whole of ``data``, firing callbacks as fields are found.
        Returns the number of bytes consumed.
        """
        length = len(data)
        if length > self.max_size:
            self.logger.warning("Body is %d bytes (max %d), refusing to parse it", length, self.max_size)
            raise BodyTooLargeError("Body is %d bytes, which is more than the maximum of %d" % (length, self.max_size))

        i = 0
        while i < length:
            self.state = QuerystringState.FIELD_NAME
            self.callback("field_start")

            equals_pos = _find_unescaped(NAME_END_RE, data, i, length)
            if equals_pos == -1:
                e = MissingSeparatorError("Did not find an equals sign in the field that starts at %d" % i)
                e.offset = i
                raise e

            self.callback("field_name", data, i, equals_pos)
            i = equals_pos + 1

            self.state = QuerystringState.FIELD_DATA
            sep_pos = _find_unescaped(DATA_END_RE, data, i, length)
            if sep_pos == -1:
                sep_pos = length

            self.callback("field_data", data, i, sep_pos)
            self.callback("field_end")

            # Step past the '&'.  If it was the last byte, we're done.
            i = sep_pos + 1

        self.state = QuerystringState.END
        self.callback("end")
        return length

    def __repr__(self) -> str:
        return "{}(max_size={!r})".format(self.__class__.__name__, self.max_size)


def tokenize(data: bytes, max_size: float = float("inf")) -> list[tuple[Span, Span]]:
    """
    Split ``data`` into the raw (name, value) spans of its fields, without
    decoding them.
    """
    pairs: list[tuple[Span, Span]] = []
    name_span = Span(0, 0)

    def on_field_name(data: bytes, start: int, end: int) -> None:
        nonlocal name_span
        name_span = Span(start, end)

    def on_field_data(data: bytes, start: int, end: int) -> None:
        pairs.append((name_span, Span(start, end)))

    parser = QuerystringParser(
        callbacks={"on_field_name": on_field_name, "on_field_data": on_field_data},
        max_size=max_size,
    )
    parser.parse(data)
    return pairs


class FormDecoder:
    """
    Decodes a complete ``application/x-www-form-urlencoded`` body into a
    :class:`FormResult`.

    Each name and value is decoded as soon as the parser has found it, so
    the body is only walked once.  Names must decode to valid UTF-8; values
    are left as bytes.  When a name repeats, the last value wins.  Any error
    aborts the whole decode.
    """

    # This is the default configuration for our form decoder.
    # Note: all sizes should be in bytes.
    DEFAULT_CONFIG: FormDecoderConfig = {
        "MAX_BODY_SIZE": float("inf"),
        # Drop carriage returns produced by a '%0D' escape?
        "DROP_CARRIAGE_RETURN": True,
    }

    def __init__(self, config: dict[Any, Any] = {}) -> None:
        self.logger = logging.getLogger(__name__)

        # Set configuration options.
        self.config: FormDecoderConfig = self.DEFAULT_CONFIG.copy()
        self.config.update(config)  # type: ignore[typeddict-item]

        self.decoder = PercentDecoder(drop_carriage_return=self.config["DROP_CARRIAGE_RETURN"])

    def decode(self, data: bytes) -> FormResult:
        if not isinstance(data, bytes):
            data = bytes(data)

        decoder = self.decoder
        fields: dict[str, bytes] = {}
        name = ""

        def on_field_name(data: bytes, start: int, end: int) -> None:
            nonlocal name
            raw = decoder.decode(data, start, end)
            try:
                name = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                e = InvalidFieldNameError("Field name at %d is not valid UTF-8: %r" % (start, raw))
                e.offset = start
                raise e from exc

        def on_field_data(data: bytes, start: int, end: int) -> None:
            if name in fields:
                self.logger.debug("Duplicate field %r, keeping the last value", name)
            fields[name] = decoder.decode(data, start, end)

        parser = QuerystringParser(
            callbacks={"on_field_name": on_field_name, "on_field_data": on_field_data},
            max_size=self.config["MAX_BODY_SIZE"],
        )
        parser.parse(data)

        return FormResult(fields)

    def __repr__(self) -> str:
        return "%s(config=%r)" % (self.__class__.__name__, self.config)


def decode_form(data: bytes, config: dict[Any, Any] = {}) -> FormResult:
    """
    Decode a complete urlencoded body.

    >>> decode_form(b"a=1&b=2") == {"a": b"1", "b": b"2"}
    True
    """
    return FormDecoder(config).decode(data)


def create_form_decoder(headers: dict[str, bytes], config: dict[Any, Any] = {}) -> FormDecoder:
    """
    This function is a helper function to aid in creating a FormDecoder
    instance.  Pass it a dictionary containing the request headers and it
    will check the Content-Type before handing you a decoder.

    :param headers: A dictionary-like object of HTTP headers.  The only
                    required header is Content-Type.

    :param config: Configuration variables to pass to the FormDecoder.
    """
    content_type: str | bytes | None = headers.get("Content-Type")
    if content_type is None:
        logger.warning("No Content-Type header given")
        raise ValueError("No Content-Type header given!")

    ctype, params = parse_options_header(content_type)
    media_type = ctype.decode("latin-1")
    if media_type not in FORM_CONTENT_TYPES:
        logger.warning("Unknown Content-Type: %r", media_type)
        raise FormParserError("Unknown Content-Type: {}".format(media_type))

    charset = params.get(b"charset")
    if charset is not None and charset.lower() not in UTF8_CHARSETS:
        logger.warning("Body declares charset %r, but field names are decoded as UTF-8", charset)

    return FormDecoder(config)


def parse_form(
    headers: dict[str, bytes], input_stream: SupportsRead, chunk_size: int = 1048576, config: dict[Any, Any] = {}
) -> FormResult:
    """
    This function is useful if you just want to read a urlencoded request
    body and get the decoded fields back.  The body is read from
    ``input_stream`` in chunks, up to the Content-Length if one is given.

    :param headers: A dictionary-like object of HTTP headers.  The only
                    required header is Content-Type.

    :param input_stream: A file-like object that represents the request body.
                         The read() method must return bytestrings.

    :param chunk_size: The maximum size to read from the input stream at once.

    :param config: Configuration variables to pass to the FormDecoder.
    """
    decoder = create_form_decoder(headers, config)
    max_size = decoder.config["MAX_BODY_SIZE"]

    # Read chunks of at most chunk_size, stopping at the Content-Length.
    content_length: int | float | bytes | None = headers.get("Content-Length")
    if content_length is not None:
        content_length = int(content_length)
    else:
        content_length = float("inf")
    bytes_read = 0
    chunks: list[bytes] = []

    while True:
        max_readable = int(min(content_length - bytes_read, chunk_size))
        buff = input_stream.read(max_readable)

        chunks.append(buff)
        bytes_read += len(buff)

        if bytes_read > max_size:
            logger.warning("Read %d bytes (max %d), giving up on this body", bytes_read, max_size)
            raise BodyTooLargeError("Body is larger than the maximum of %d bytes" % max_size)

        if len(buff) != max_readable or bytes_read == content_length:
            break

    return decoder.decode(b"".join(chunks))
