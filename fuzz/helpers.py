import atheris

# Bytes that steer the decoder into its interesting branches.
FORM_ALPHABET = b"=&%+0123456789abcdefABCDEFxyz\r\n\xc3\xff"


class EnhancedDataProvider(atheris.FuzzedDataProvider):
    def ConsumeRandomBytes(self) -> bytes:
        return self.ConsumeBytes(self.ConsumeIntInRange(0, self.remaining_bytes()))

    def ConsumeFormBody(self) -> bytes:
        """Random bytes mapped onto characters that matter to a urlencoded body."""
        raw = self.ConsumeRandomBytes()
        return bytes(FORM_ALPHABET[b % len(FORM_ALPHABET)] for b in raw)
