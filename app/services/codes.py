"""Verification code generation."""

import secrets
import string

from app.config import get_settings

CODE_ALPHABET = string.ascii_uppercase + string.digits


class CodeGenerator:
    """Generates short, unpredictable codes from a CSPRNG."""

    def __init__(self, length: int | None = None, alphabet: str = CODE_ALPHABET) -> None:
        self.length = length if length is not None else get_settings().VERIFICATION_CODE_LENGTH
        self.alphabet = alphabet

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
