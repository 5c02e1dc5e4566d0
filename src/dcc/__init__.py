# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for the data class compatibility checker."""

from dcc.comparator import compare, compare_sources
from dcc.discovery import IgnoreMatcher, SourcePair, discover_source_pairs
from dcc.extractor import extract
from dcc.model import (
    CompatibilityReport,
    FieldDescriptor,
    Finding,
    RecordComparison,
    RecordDescriptor,
    Severity,
    SourceComparison,
)

__all__ = [
    "CompatibilityReport",
    "FieldDescriptor",
    "Finding",
    "IgnoreMatcher",
    "RecordComparison",
    "RecordDescriptor",
    "Severity",
    "SourceComparison",
    "SourcePair",
    "compare",
    "compare_sources",
    "discover_source_pairs",
    "extract",
]
