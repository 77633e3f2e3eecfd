class FormParserError(ValueError):
    """Base error class for our form parser."""


class ParseError(FormParserError):
    """This exception (or a subclass) is raised when there is an error while
    parsing something.
    """

    #: This is the offset in the input buffer at which the parse error
    #: occurred.  It will be -1 if not specified.
    offset = -1


class QuerystringParseError(ParseError):
    """This is a specific error that is raised when the QuerystringParser
    detects an error while splitting the body into fields.
    """


class MissingSeparatorError(QuerystringParseError):
    """Raised when a field name is not followed by an equals sign before the
    end of the body.
    """


class InvalidFieldNameError(QuerystringParseError):
    """Raised when a decoded field name is not valid UTF-8."""


class DecodeError(ParseError):
    """This exception is raised when there is an error while reversing the
    percent-encoding of a name or value.
    """


class TruncatedEscapeError(DecodeError):
    """Raised when a '%' is not followed by two more bytes."""


class InvalidHexDigitError(DecodeError):
    """Raised when the two bytes after a '%' are not hexadecimal digits."""


class BodyTooLargeError(FormParserError):
    """Raised when a body is larger than the configured maximum size."""


class ResponseError(ValueError):
    """Base error class for the response helpers."""


class UnknownStatusError(ResponseError):
    """Raised when there is no reason phrase for a status code."""


class InvalidHeaderError(ResponseError):
    """Raised when a header name or value cannot be sent as-is."""


class FileError(ResponseError, OSError):
    """Exception class for problems reading or writing response files."""
