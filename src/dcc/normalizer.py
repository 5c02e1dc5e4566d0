"""Source normalization helpers for declaration scanning."""

import logging

logger = logging.getLogger(__name__)

_RAW_QUOTE = '"""'


def strip_comments(text: str) -> str:
    """Remove line and block comments while keeping string literals intact.

    Block comments may nest. Each comment is replaced by a single space;
    newlines inside block comments are preserved so line numbers survive.

    Args:
        text: Raw source text.

    Returns:
        Source text without comments.
    """
    parts: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char in "\"'":
            end = string_literal_end(text, index)
            parts.append(text[index:end])
            index = end
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            parts.append(" ")
        elif text.startswith("/*", index):
            end = _block_comment_end(text, index)
            parts.append(" " + "\n" * text.count("\n", index, end))
            index = end
        else:
            parts.append(char)
            index += 1
    return "".join(parts)


def string_literal_end(text: str, start: int) -> int:
    """Return the index just past the string or char literal opening at ``start``.

    Handles raw ``\"\"\"`` strings, escapes and ``${...}`` templates. An
    unterminated literal extends to the end of ``text``.

    Args:
        text: Source text.
        start: Index of the opening quote.

    Returns:
        End index (exclusive) of the literal.
    """
    length = len(text)
    if text.startswith(_RAW_QUOTE, start):
        index = start + len(_RAW_QUOTE)
        while index < length:
            if text.startswith(_RAW_QUOTE, index):
                # Trailing quotes belong to the literal: """a""""
                index += len(_RAW_QUOTE)
                while index < length and text[index] == '"':
                    index += 1
                return index
            if text.startswith("${", index):
                index = _template_end(text, index + 2)
                continue
            index += 1
        return length

    quote = text[start]
    index = start + 1
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        if char == "\n":
            # Single-line literals cannot span lines; stop scanning here.
            return index
        if quote == '"' and text.startswith("${", index):
            index = _template_end(text, index + 2)
            continue
        index += 1
    return length


def _template_end(text: str, start: int) -> int:
    """Return the index just past the ``}`` closing a string template."""
    depth = 1
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char in "\"'":
            index = string_literal_end(text, index)
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return length


def _block_comment_end(text: str, start: int) -> int:
    depth = 0
    index = start
    length = len(text)
    while index < length:
        if text.startswith("/*", index):
            depth += 1
            index += 2
        elif text.startswith("*/", index):
            depth -= 1
            index += 2
            if depth == 0:
                return index
        else:
            index += 1
    logger.debug(f"Unterminated block comment runs to end of input (offset={start})")
    return length
