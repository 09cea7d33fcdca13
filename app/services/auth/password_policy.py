"""
Password Policy

Stateless rule checker for candidate passwords. Every rule is evaluated
and every violation is reported, always in the same order.
"""

import re
from dataclasses import dataclass, field

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

LENGTH_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
UPPERCASE_MESSAGE = "Password must contain at least one uppercase letter"
LOWERCASE_MESSAGE = "Password must contain at least one lowercase letter"
DIGIT_MESSAGE = "Password must contain at least one number"
SPECIAL_MESSAGE = "Password must contain at least one special character"


@dataclass(frozen=True)
class PasswordValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordValidation:
    """
    Check a password against the policy.

    Rules: minimum length, one uppercase letter, one lowercase letter,
    one digit and one character from SPECIAL_CHARACTERS.

    Returns:
        PasswordValidation with the violated-rule messages in rule order
    """
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(LENGTH_MESSAGE)
    if not _UPPERCASE.search(password):
        errors.append(UPPERCASE_MESSAGE)
    if not _LOWERCASE.search(password):
        errors.append(LOWERCASE_MESSAGE)
    if not _DIGIT.search(password):
        errors.append(DIGIT_MESSAGE)
    if not _SPECIAL.search(password):
        errors.append(SPECIAL_MESSAGE)

    return PasswordValidation(is_valid=not errors, errors=errors)
