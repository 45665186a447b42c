"""Normalisation of HTTP request paths."""

from __future__ import annotations

__all__ = ["simplify_request_path"]


def simplify_request_path(path: str) -> str:
    """Collapse ``//``, ``/./`` and ``/../`` segments of a request path.

    Leading spaces are dropped, and ``..`` never climbs above the root.
    A trailing slash is kept. The text ends at the first NUL character.
    """
    text = path.split("\0", 1)[0]
    if not text:
        return ""

    text = text.lstrip(" ")
    if text.startswith("."):
        if text[1:2] in ("/", ""):
            text = text[1:]
        elif text[1:2] == "." and text[2:3] in ("/", ""):
            text = text[2:]

    out: list[str] = []
    slash = 0
    pre1 = ""
    for index, current in enumerate(text):
        pre2, pre1 = pre1, current
        following = text[index + 1:index + 2]
        out.append(current)

        if following not in ("/", ""):
            continue
        at_end = not following
        token_length = len(out) - slash

        if token_length == 3 and pre2 == "." and pre1 == "." and out[slash] == "/":
            # "/../" or "/.." at the end: drop the previous component too
            pos = slash
            if pos > 0:
                pos -= 1
                while pos > 0 and out[pos] != "/":
                    pos -= 1
            if at_end:
                pos += 1
            del out[pos:]
        elif token_length == 1 or (pre2 == "/" and pre1 == "."):
            # "//" or "/./", or "/" and "/." at the end
            del out[slash + (1 if at_end else 0):]

        slash = len(out)

    return "".join(out)