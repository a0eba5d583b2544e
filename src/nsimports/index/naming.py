"""Module-name derivation from file names."""

from __future__ import annotations

import posixpath

_UPPER, _LOWER, _DIGIT = "upper", "lower", "digit"


def _kind(char: str) -> str | None:
    if char.isupper():
        return _UPPER
    # uncased letters (CJK, etc.) join lowercase runs
    if char.islower() or char.isalpha():
        return _LOWER
    if char.isdigit():
        return _DIGIT
    return None


def split_words(text: str) -> list[str]:
    """Split *text* into words, Unicode-aware.

    Boundaries are non-alphanumerics, lower -> upper transitions, letter <->
    digit transitions and the end of an acronym run (``XMLHttp`` ->
    ``XML``, ``Http``).
    """
    words: list[str] = []
    current = ""
    prev: str | None = None

    for char in text:
        kind = _kind(char)
        if kind is None:
            if current:
                words.append(current)
            current, prev = "", None
            continue

        if current:
            if (kind == _DIGIT) != (prev == _DIGIT) or (kind == _UPPER and prev == _LOWER):
                words.append(current)
                current = ""
            elif kind == _LOWER and prev == _UPPER and len(current) > 1:
                # the last capital starts the next word
                words.append(current[:-1])
                current = current[-1]

        current += char
        prev = kind

    if current:
        words.append(current)
    return words


def camel_case(text: str) -> str:
    """Return *text* in camelCase: ``foo_bar`` -> ``fooBar``, ``XMLHttp`` -> ``xmlHttp``."""
    words = split_words(text)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)


def module_name_for(file_path: str) -> str:
    """Derive the namespace-import name for a source file.

    Only the base name counts; the final suffix is dropped, so
    ``index.d.ts`` becomes ``indexD``.
    """
    stem, _ext = posixpath.splitext(posixpath.basename(file_path))
    return camel_case(stem)
