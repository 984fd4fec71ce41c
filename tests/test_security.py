"""
API key and file name checks. Run with: pytest tests/
"""
import asyncio

import pytest

from utils import check_api_key, mask_api_key, run_async_with_timeout, sanitize_filename

VALID_KEY = "sk-proj-" + "a1B2c3D4e5" * 3


def test_valid_key():
    assert check_api_key(VALID_KEY) == (True, "")


def test_surrounding_whitespace_is_ignored():
    assert check_api_key(f"  {VALID_KEY}\n")[0] is True


@pytest.mark.parametrize("key, reason", [
    (None, "Enter"),
    ("   ", "Enter"),
    ("pk-" + "a" * 30, "start with 'sk-'"),
    ("sk-short", "too short"),
    ("sk-" + "a" * 25 + "!", "characters"),
])
def test_invalid_keys(key, reason):
    is_valid, message = check_api_key(key)
    assert is_valid is False
    assert reason in message


def test_mask_api_key():
    masked = mask_api_key(VALID_KEY)
    assert masked.startswith("sk-")
    assert masked.endswith(VALID_KEY[-4:])
    assert VALID_KEY[5:20] not in masked
    assert mask_api_key("sk-1") == "sk-****"


@pytest.mark.parametrize("name, expected", [
    ("sales.csv", "sales.csv"),
    ("../../etc/passwd.csv", "passwd.csv"),
    ("C:\\Users\\me\\report 2024.xlsx", "report_2024.xlsx"),
    (".hidden.json", "hidden.json"),
    ("", "upload"),
])
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_long_filename_keeps_extension():
    name = sanitize_filename("x" * 300 + ".csv")
    assert len(name) == 100
    assert name.endswith(".csv")


def test_runner_returns_result():
    async def answer():
        await asyncio.sleep(0)
        return 42

    assert run_async_with_timeout(answer(), timeout=1) == 42


def test_runner_times_out():
    async def slow():
        await asyncio.sleep(1)

    with pytest.raises(TimeoutError, match="0.05 seconds"):
        run_async_with_timeout(slow(), timeout=0.05)
