import pytest

from railbook.identity import is_strong_password, is_valid_id, normalize_id


@pytest.mark.parametrize("user_id", ["A123456789", "F131104093"])
def test_valid_ids(user_id) -> None:
    assert is_valid_id(user_id)


@pytest.mark.parametrize(
    "user_id",
    [
        "A123456788",  # checksum off by one
        "a123456789",  # lower-case letter
        "A323456789",  # second digit must be 1 or 2
        "A12345678",  # too short
        "A1234567890",  # too long
        "1123456789",
        "A123456789\n",
        "",
    ],
)
def test_invalid_ids(user_id) -> None:
    assert not is_valid_id(user_id)


def test_normalize_id() -> None:
    assert normalize_id("  a123456789 ") == "A123456789"
    assert is_valid_id(normalize_id("f131104093"))


@pytest.mark.parametrize("password", ["abc123", "A1b2C3d4", "000abc"])
def test_strong_passwords(password) -> None:
    assert is_strong_password(password)


@pytest.mark.parametrize("password", ["abcdef", "123456", "ab12", "abc 123", "abc123!", "密碼abc123"])
def test_weak_passwords(password) -> None:
    assert not is_strong_password(password)
