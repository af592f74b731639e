import os
import re
import secrets
import time


def sanitize_filename(filename: str) -> str:
    """Replace anything outside [a-zA-Z0-9.-] and collapse runs of underscores."""
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", filename)
    cleaned = re.sub(r"_{2,}", "_", cleaned)
    return cleaned.strip("_")


def get_file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def random_suffix(length: int = 6) -> str:
    alphabet = "abcdefghijklmnopqrstuvwxyz0123456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_unique_filename(original_name: str) -> str:
    """<sanitized-name>-<epoch-ms>-<random6><ext>"""
    extension = get_file_extension(original_name)
    stem = os.path.splitext(os.path.basename(original_name or ""))[0]
    name = sanitize_filename(stem) or "file"
    return f"{name}-{int(time.time() * 1000)}-{random_suffix()}{extension}"


def generate_public_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{random_suffix()}"


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def mime_category(mime_type: str | None) -> str | None:
    if not mime_type:
        return None
    if mime_type.startswith("image/"):
        return "image"
    if mime_type == "application/pdf":
        return "pdf"
    return "document"
