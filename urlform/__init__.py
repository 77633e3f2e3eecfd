__version__ = "0.1.0"

from .form import (
    FormDecoder,
    FormResult,
    QuerystringParser,
    Span,
    create_form_decoder,
    decode_form,
    parse_form,
    tokenize,
)

__all__ = (
    "FormDecoder",
    "FormResult",
    "QuerystringParser",
    "Span",
    "create_form_decoder",
    "decode_form",
    "parse_form",
    "tokenize",
)
