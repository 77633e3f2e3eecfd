import io
import sys

import atheris
from helpers import EnhancedDataProvider

with atheris.instrument_imports():
    from urlform.exceptions import FormParserError
    from urlform.form import decode_form, parse_form, tokenize


def decode_random_bytes(fdp: EnhancedDataProvider) -> None:
    decode_form(fdp.ConsumeRandomBytes())


def decode_form_body(fdp: EnhancedDataProvider) -> None:
    data = fdp.ConsumeFormBody()
    result = decode_form(data)
    # Every decoded field came from a span found by the tokenizer.
    assert len(result) <= len(tokenize(data))


def parse_url_encoded(fdp: EnhancedDataProvider) -> None:
    header = {"Content-Type": "application/x-url-encoded"}
    parse_form(header, io.BytesIO(fdp.ConsumeFormBody()), chunk_size=fdp.ConsumeIntInRange(1, 64))


def parse_form_urlencoded(fdp: EnhancedDataProvider) -> None:
    header = {"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"}
    parse_form(header, io.BytesIO(fdp.ConsumeFormBody()))


def TestOneInput(data: bytes) -> None:
    fdp = EnhancedDataProvider(data)
    targets = [decode_random_bytes, decode_form_body, parse_url_encoded, parse_form_urlencoded]
    target = fdp.PickValueInList(targets)

    try:
        target(fdp)
    except FormParserError:
        return


def main():
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
