# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Pattern-based data class extractor.

Extraction is best-effort: it balances delimiters and skips string literals
but does not parse expressions. Text that does not look like a data class
declaration is ignored rather than reported.
"""

import logging
import re

from dcc.model import FieldDescriptor, RecordDescriptor
from dcc.normalizer import string_literal_end, strip_comments

logger = logging.getLogger(__name__)

_RECORD_HEADER = re.compile(
    r"\bdata\s+class\s+(?P<name>\w+)\s*"
    r"(?:<[^(){};]*>\s*)?"
    r"(?:(?:@\w+\s+|private\s+|internal\s+|protected\s+|public\s+)*constructor\s*)?"
    r"\("
)
_PARAMETER_HEAD = re.compile(
    r"(?:@[\w.:]+(?:\([^()]*\))?\s*"
    r"|(?:private|protected|internal|public|override|open|final|vararg|const)\s+)*"
    r"(?:val|var)\s+(?P<name>\w+)\s*:"
)

_OPENERS = "([{"
_CLOSERS = ")]}"


def extract(source_text: str) -> list[RecordDescriptor]:
    """Extract every data class declaration from source text.

    Args:
        source_text: Kotlin-like source text. Not validated.

    Returns:
        Records in source order. Empty when nothing matches.
    """
    text = strip_comments(source_text)
    records: list[RecordDescriptor] = []
    for match in _RECORD_HEADER.finditer(text):
        name = match.group("name")
        close = _matching_paren(text, match.end())
        if close is None:
            logger.debug(
                f"Skipping data class with unbalanced parameter list (name={name})"
            )
            continue
        fields: dict[str, FieldDescriptor] = {}
        for chunk in split_parameters(text[match.end() : close]):
            field = _parse_parameter(chunk)
            if field is None:
                continue
            if field.name in fields:
                logger.debug(
                    f"Ignoring duplicate field declaration (record={name} field={field.name})"
                )
                continue
            fields[field.name] = field
        records.append(RecordDescriptor.build(name=name, fields=fields.values()))
    logger.debug(f"Extraction finished (records={len(records)})")
    return records


def split_parameters(parameter_text: str) -> list[str]:
    """Split a parameter list at top-level commas.

    Nesting of ``()``, ``[]`` and ``{}`` is tracked so call arguments stay in
    one chunk. ``<>`` is tracked only outside those brackets, which keeps
    generic type arguments together without letting comparison operators in
    call arguments swallow later parameters. The ``>`` of ``->`` is not a
    bracket.

    Args:
        parameter_text: Text between the parentheses of a declaration.

    Returns:
        Stripped, non-empty parameter chunks in order.
    """
    chunks: list[str] = []
    depth = 0
    angle_depth = 0
    start = 0
    index = 0
    length = len(parameter_text)
    while index < length:
        char = parameter_text[index]
        if char in "\"'":
            index = string_literal_end(parameter_text, index)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == "<" and depth == 0:
            angle_depth += 1
        elif (
            char == ">"
            and depth == 0
            and (index == 0 or parameter_text[index - 1] != "-")
        ):
            angle_depth = max(0, angle_depth - 1)
        elif char == "," and depth == 0 and angle_depth == 0:
            chunks.append(parameter_text[start:index])
            start = index + 1
        index += 1
    chunks.append(parameter_text[start:])
    return [chunk.strip() for chunk in chunks if chunk.strip()]


def _matching_paren(text: str, start: int) -> int | None:
    """Return the index of the ``)`` closing the list opened just before ``start``."""
    depth = 1
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char in "\"'":
            index = string_literal_end(text, index)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def _parse_parameter(chunk: str) -> FieldDescriptor | None:
    match = _PARAMETER_HEAD.match(chunk)
    if match is None:
        return None
    type_text, separator, default_text = chunk[match.end() :].partition("=")
    type_text = type_text.strip()
    nullable = type_text.endswith("?")
    if nullable:
        type_text = type_text[:-1].rstrip()
    if not type_text:
        logger.debug(f"Skipping parameter without a type (chunk={chunk!r})")
        return None
    return FieldDescriptor(
        name=match.group("name"),
        type=type_text,
        nullable=nullable,
        has_default=bool(separator) and bool(default_text.strip()),
        position=0,
    )
