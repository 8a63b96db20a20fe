import re
from typing import Optional
from urllib.parse import urlparse


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def ensure_positive_int(value: int, field: str) -> int:
    if value is None or int(value) < 0:
        raise ValueError(f"{field} must be >= 0")
    return int(value)


def is_valid_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value and _EMAIL_RE.match(value.strip()))
