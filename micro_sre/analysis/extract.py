"""Locate a JSON object embedded in free-form model output."""

from __future__ import annotations


def extract_json(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in ``text`` or ``None``.

    The scan starts at the first ``{`` and tracks brace depth outside of
    string literals, so braces inside quoted values and in trailing prose do
    not confuse it. Returns ``None`` if there is no ``{`` or it never closes.
    """

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if escaped:
            escaped = False
            continue
        if char == "\\" and in_string:
            escaped = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


__all__ = ["extract_json"]
