"""Credential format rules: email address shape and password strength."""

import re
import unicodedata

from domain.model.errors import ErrorKind, ValidationError

MAX_LOCAL_LENGTH = 64
MAX_DOMAIN_LENGTH = 255
MAX_ADDRESS_LENGTH = 254
MAX_LABEL_LENGTH = 63
MIN_PASSWORD_LENGTH = 8

_DISPLAY_NAME_FORM = re.compile(r'^[^<>@]*<([^<>]+)>$')
_LOCAL_CHARS = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.-]+$")
_LABEL_CHARS = re.compile(r'^[A-Za-z0-9-]+$')


def validate_email(email: str) -> str:
    """Validate an email address and return the bare address.

    Accepts ``local@domain`` or ``Display Name <local@domain>``.

    Raises:
        ValidationError: INVALID_EMAIL_FORMAT on the first violated rule
    """
    address = normalize_email(email)
    if address is None or not _is_valid_address(address):
        raise ValidationError(ErrorKind.INVALID_EMAIL_FORMAT)
    return address


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email)
    except ValidationError:
        return False
    return True


def normalize_email(email: str) -> str | None:
    """Bare address from either accepted form, or None when it cannot be extracted."""
    email = (email or '').strip()
    if not email:
        return None
    match = _DISPLAY_NAME_FORM.match(email)
    if match:
        email = match.group(1).strip()
    if any(ch.isspace() for ch in email):
        return None
    return email


def _is_valid_address(address: str) -> bool:
    parts = address.split('@')
    if len(parts) != 2:
        return False
    local, domain = parts

    if not 0 < len(local) <= MAX_LOCAL_LENGTH:
        return False
    if not 0 < len(domain) <= MAX_DOMAIN_LENGTH:
        return False
    if len(address) > MAX_ADDRESS_LENGTH:
        return False

    if local.startswith('.') or local.endswith('.') or '..' in local:
        return False

    for label in domain.split('.'):
        if not label or len(label) > MAX_LABEL_LENGTH:
            return False
        if label.startswith('-') or label.endswith('-'):
            return False
        if not _LABEL_CHARS.match(label):
            return False

    return bool(_LOCAL_CHARS.match(local))


def validate_password(password: str) -> None:
    """Check password strength.

    Every rule is evaluated over the whole string; the reported failure is
    the first in fixed order: length, uppercase, lowercase, digit, symbol.

    Raises:
        ValidationError: with the kind of the first failing rule
    """
    password = password or ''
    has_min_len = len(password) >= MIN_PASSWORD_LENGTH
    has_upper = has_lower = has_digit = has_symbol = False

    for ch in password:
        if ch.isupper():
            has_upper = True
        elif ch.islower():
            has_lower = True
        elif ch.isdigit():
            has_digit = True
        elif unicodedata.category(ch)[0] in ('P', 'S'):
            has_symbol = True

    checks = (
        (has_min_len, ErrorKind.PASSWORD_TOO_SHORT),
        (has_upper, ErrorKind.PASSWORD_MISSING_UPPER),
        (has_lower, ErrorKind.PASSWORD_MISSING_LOWER),
        (has_digit, ErrorKind.PASSWORD_MISSING_DIGIT),
        (has_symbol, ErrorKind.PASSWORD_MISSING_SYMBOL),
    )
    for passed, kind in checks:
        if not passed:
            raise ValidationError(kind)
