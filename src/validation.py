import re

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def is_valid_email(value):
    return bool(value) and bool(EMAIL_RE.match(value))


def is_valid_url(value):
    return bool(value) and bool(URL_RE.match(value))
