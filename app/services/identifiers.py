"""Login identifier classification.

A login identifier is either an email address or a phone number in the
configured national format. Every operation that takes an identifier parses it
once with ``parse_identifier`` and passes the resulting object downward.
"""

import enum
import re
from dataclasses import dataclass
from typing import ClassVar

from app.config import get_settings
from app.errors import InvalidIdentifier
from app.models.user import User

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)*\.[A-Za-z]{2,}$")


class Channel(str, enum.Enum):
    """Delivery channel for codes and notifications."""

    EMAIL = "email"
    PHONE = "phone"


@dataclass(frozen=True)
class Identifier:
    """Normalized login identifier."""

    value: str

    channel: ClassVar[Channel]

    @property
    def column(self):
        """User column this identifier is looked up by."""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EmailIdentifier(Identifier):
    channel = Channel.EMAIL

    @property
    def column(self):
        return User.email


@dataclass(frozen=True)
class PhoneIdentifier(Identifier):
    channel = Channel.PHONE

    @property
    def column(self):
        return User.phone_number


def normalize_email(raw: str) -> str | None:
    """Return the lower-cased email, or None if it is not an email address."""
    candidate = raw.strip()
    if EMAIL_PATTERN.match(candidate):
        return candidate.lower()
    return None


def normalize_phone(raw: str, country_code: str | None = None, length: int | None = None) -> str | None:
    """Return the phone number with whitespace removed, or None if it is not one."""
    settings = get_settings()
    country_code = country_code or settings.PHONE_COUNTRY_CODE
    length = length or settings.PHONE_NUMBER_LENGTH

    candidate = "".join(raw.split())
    if not candidate.startswith(country_code) or len(candidate) != length:
        return None
    if not candidate[len(country_code) :].isdigit():
        return None
    return candidate


def parse_identifier(raw: str) -> Identifier:
    """Classify a login identifier. Raises InvalidIdentifier if it is neither kind."""
    if raw is None:
        raise InvalidIdentifier()
    email = normalize_email(raw)
    if email:
        return EmailIdentifier(email)
    phone = normalize_phone(raw)
    if phone:
        return PhoneIdentifier(phone)
    raise InvalidIdentifier()
