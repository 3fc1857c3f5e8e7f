import re

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email_format(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def normalize_email(email: str) -> str:
    return email.strip().lower()
