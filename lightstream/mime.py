"""Guessing of MIME types from file names."""

from __future__ import annotations

__all__ = ["guess_mime_type"]

DEFAULT_MIME_TYPE = "application/misc"

_MIME_TYPES = {
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "txt": "text/plain",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "swf": "application/x-shockwave-flash",
    "cab": "application/x-shockwave-flash",
    "jar": "application/java-archive",
    "json": "application/json",
}


def guess_mime_type(path: str) -> str:
    """Return the MIME type for the extension of ``path``, case-insensitively."""
    dot = path.rfind(".")
    if dot < 0 or "/" in path[dot:]:
        return DEFAULT_MIME_TYPE
    ext = path[dot + 1:]
    if not ext.isascii():
        return DEFAULT_MIME_TYPE
    return _MIME_TYPES.get(ext.lower(), DEFAULT_MIME_TYPE)