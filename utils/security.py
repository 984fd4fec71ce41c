"""Checks for user-supplied API keys and upload names"""

import re
from pathlib import PurePath
from typing import Optional, Tuple

# One rule for every place that accepts or reports on a key
API_KEY_PATTERN = re.compile(r"^sk-[A-Za-z0-9_\-]{20,}$")

MAX_FILENAME_LENGTH = 100


def check_api_key(api_key: Optional[str]) -> Tuple[bool, str]:
    """
    Check that a string looks like an OpenAI API key.

    Returns:
        Tuple of (is_valid, reason); reason is empty for a valid key
    """
    if not api_key or not api_key.strip():
        return False, "Enter an OpenAI API key"

    api_key = api_key.strip()
    if not api_key.startswith("sk-"):
        return False, "OpenAI API keys start with 'sk-'"

    if not API_KEY_PATTERN.match(api_key):
        return False, "Key is too short or contains characters OpenAI keys never use"

    return True, ""


def mask_api_key(api_key: Optional[str]) -> str:
    """Show only the key prefix and its last four characters"""
    if not api_key or len(api_key) < 12:
        return "sk-****"
    return f"{api_key[:3]}****{api_key[-4:]}"


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded file name to a safe base name, keeping its extension"""
    # Browsers may send a full client-side path
    name = PurePath(filename.replace("\\", "/")).name
    name = re.sub(r"[^\w\-.]", "_", name).lstrip(".-")

    if len(name) > MAX_FILENAME_LENGTH:
        stem, dot, extension = name.rpartition(".")
        if dot and len(extension) < 10:
            name = stem[:MAX_FILENAME_LENGTH - len(extension) - 1] + "." + extension
        else:
            name = name[:MAX_FILENAME_LENGTH]

    return name or "upload"
