"""National ID checksum and password rules used at registration."""

import re

_ID_RE = re.compile(r"^[A-Z][12][0-9]{8}$")
_PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z0-9]{6,}$")

# Letter order of the ID scheme; a letter's position + 10 gives its two-digit code
ID_LETTERS = "ABCDEFGHJKLMNPQRSTUVXYWZIO"
ID_WEIGHTS = (1, 9, 8, 7, 6, 5, 4, 3, 2, 1, 1)


def normalize_id(text: str) -> str:
    return text.strip().upper()


def is_valid_id(text: str) -> bool:
    """True when text is a well-formed ID whose weighted checksum is divisible by 10."""
    if not isinstance(text, str) or not _ID_RE.fullmatch(text):
        return False

    code = ID_LETTERS.index(text[0]) + 10
    digits = [code // 10, code % 10] + [int(c) for c in text[1:]]
    total = sum(d * w for d, w in zip(digits, ID_WEIGHTS))
    return total % 10 == 0


def is_strong_password(text: str) -> bool:
    """At least 6 ASCII letters/digits, mixing both."""
    return isinstance(text, str) and bool(_PASSWORD_RE.fullmatch(text))
