import sys

import atheris
from helpers import EnhancedDataProvider

with atheris.instrument_imports():
    from urlform.decoders import PercentDecoder
    from urlform.exceptions import DecodeError


def fuzz_percent_decoder(fdp: EnhancedDataProvider) -> None:
    decoder = PercentDecoder(drop_carriage_return=fdp.ConsumeBool())
    data = fdp.ConsumeFormBody()
    start = fdp.ConsumeIntInRange(0, len(data))
    end = fdp.ConsumeIntInRange(start, len(data))
    out = decoder.decode(data, start, end)
    assert len(out) <= end - start


def TestOneInput(data: bytes) -> None:
    fdp = EnhancedDataProvider(data)

    try:
        fuzz_percent_decoder(fdp)
    except DecodeError:
        return


def main():
    atheris.Setup(sys.argv, TestOneInput)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
