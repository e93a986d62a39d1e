from __future__ import annotations

import os

TEMP_SUFFIX = ".tmp"


def local_name(name: str, fallback: str) -> str:
    """
    File-system safe version of a Drive name.

    Drive allows '/' (and on Windows-hosted mirrors '\\') inside names;
    those would otherwise create extra directory levels. "", "." and ".."
    fall back to the object id.
    """
    cleaned = name.replace("/", "_")
    if os.sep != "/":
        cleaned = cleaned.replace(os.sep, "_")
    cleaned = cleaned.strip()
    if cleaned in ("", ".", ".."):
        return fallback
    return cleaned


def temp_path(target_path: str, file_id: str) -> str:
    """
    Sibling path a download is written to before it is verified.

    The file id keeps same-named siblings downloading in one batch apart.
    """
    return f"{target_path}.{file_id}{TEMP_SUFFIX}"
