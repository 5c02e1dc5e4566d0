# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compatibility classification between two versions of a data class."""

import logging
from typing import Sequence

from dcc.model import (
    FieldDescriptor,
    Finding,
    RecordComparison,
    RecordDescriptor,
    Severity,
    SourceComparison,
)

logger = logging.getLogger(__name__)


def compare(old: RecordDescriptor, new: RecordDescriptor) -> list[Finding]:
    """Classify every difference between two versions of one record.

    Rules run independently and in a fixed order; one edit may produce
    several findings. The added-field rule uses positional alignment, all
    other rules align fields by name.

    Args:
        old: Previously published record shape.
        new: Candidate record shape.

    Returns:
        Findings in rule order.
    """
    old_by_name = old.field_by_name()
    new_by_name = new.field_by_name()
    shared = [
        (old_field, new_by_name[old_field.name])
        for old_field in old.fields
        if old_field.name in new_by_name
    ]

    findings: list[Finding] = []
    findings.extend(_added_without_default(old=old, new=new))
    findings.extend(_moved(shared))
    findings.extend(
        Finding(
            severity=Severity.BREAKING,
            kind="field_removed",
            message=f"Field '{old_field.name}' removed",
            field_name=old_field.name,
        )
        for old_field in old.fields
        if old_field.name not in new_by_name
    )
    findings.extend(_type_changed(shared))
    findings.extend(_nullability_changed(shared))
    return findings


def compare_sources(
    old_records: Sequence[RecordDescriptor],
    new_records: Sequence[RecordDescriptor],
    label: str = "",
) -> SourceComparison:
    """Pair records by name across two record sets and compare each pair.

    Records may come from several files (``RecordDescriptor.source``). A
    name declared in more than one file is paired with the same-file record
    first, then with the first unclaimed record of that name, so a class
    moved between files is still compared rather than reported removed.
    A repeated name within one file keeps its first declaration.

    Args:
        old_records: Records extracted from the old sources.
        new_records: Records extracted from the new sources.
        label: Display label for the comparison.

    Returns:
        Comparisons for old records in order, followed by new records that
        were not paired with an old one.
    """
    old_unique = _drop_duplicates(old_records, label=label)
    new_unique = _drop_duplicates(new_records, label=label)
    candidates: dict[str, list[int]] = {}
    for index, record in enumerate(new_unique):
        candidates.setdefault(record.name, []).append(index)

    comparisons: list[RecordComparison] = []
    claimed: set[int] = set()
    for old_record in old_unique:
        chosen = _claim(
            old_record, new_unique, candidates.get(old_record.name, []), claimed
        )
        if chosen is None:
            comparisons.append(
                RecordComparison(
                    name=old_record.name,
                    status="removed",
                    findings=(
                        Finding(
                            severity=Severity.BREAKING,
                            kind="record_removed",
                            message=f"Data class '{old_record.name}' removed",
                        ),
                    ),
                    old_source=old_record.source or None,
                )
            )
            continue
        new_record = new_unique[chosen]
        comparisons.append(
            RecordComparison(
                name=old_record.name,
                status="compared",
                findings=tuple(compare(old_record, new_record)),
                old_source=old_record.source or None,
                new_source=new_record.source or None,
            )
        )

    for index, new_record in enumerate(new_unique):
        if index not in claimed:
            comparisons.append(
                RecordComparison(
                    name=new_record.name,
                    status="added",
                    new_source=new_record.source or None,
                )
            )

    result = SourceComparison(
        label=label,
        old_records=tuple(old_records),
        new_records=tuple(new_records),
        comparisons=tuple(comparisons),
    )
    logger.debug(
        f"Source comparison finished (label={label} records={len(comparisons)} "
        f"breaking={result.has_breaking_changes})"
    )
    return result


def _drop_duplicates(
    records: Sequence[RecordDescriptor], label: str
) -> list[RecordDescriptor]:
    seen: set[tuple[str, str]] = set()
    unique: list[RecordDescriptor] = []
    for record in records:
        key = (record.source, record.name)
        if key in seen:
            logger.debug(
                f"Ignoring duplicate data class declaration "
                f"(name={record.name} source={record.source} label={label})"
            )
            continue
        seen.add(key)
        unique.append(record)
    return unique


def _claim(
    old_record: RecordDescriptor,
    new_records: list[RecordDescriptor],
    candidates: list[int],
    claimed: set[int],
) -> int | None:
    """Pick and claim the index of the new record paired with ``old_record``."""
    available = [index for index in candidates if index not in claimed]
    if not available:
        return None
    same_source = [
        index for index in available if new_records[index].source == old_record.source
    ]
    chosen = same_source[0] if same_source else available[0]
    claimed.add(chosen)
    return chosen


def _added_without_default(
    old: RecordDescriptor, new: RecordDescriptor
) -> list[Finding]:
    findings: list[Finding] = []
    for index, new_field in enumerate(new.fields):
        old_field = old.fields[index] if index < len(old.fields) else None
        if old_field is not None and old_field.name == new_field.name:
            continue
        if new_field.has_default or new_field.nullable:
            continue
        findings.append(
            Finding(
                severity=Severity.BREAKING,
                kind="field_added",
                message=f"Field '{new_field.name}' added at position {index} with no default value",
                field_name=new_field.name,
            )
        )
    return findings


def _moved(shared: list[tuple[FieldDescriptor, FieldDescriptor]]) -> list[Finding]:
    return [
        Finding(
            severity=Severity.WARNING,
            kind="field_moved",
            message=(
                f"Field '{old_field.name}' moved from position "
                f"{old_field.position} to position {new_field.position}"
            ),
            field_name=old_field.name,
        )
        for old_field, new_field in shared
        if old_field.position != new_field.position
    ]


def _type_changed(
    shared: list[tuple[FieldDescriptor, FieldDescriptor]],
) -> list[Finding]:
    return [
        Finding(
            severity=Severity.BREAKING,
            kind="type_changed",
            message=f"Type of '{old_field.name}' changed from {old_field.type} to {new_field.type}",
            field_name=old_field.name,
        )
        for old_field, new_field in shared
        if old_field.type != new_field.type
    ]


def _nullability_changed(
    shared: list[tuple[FieldDescriptor, FieldDescriptor]],
) -> list[Finding]:
    findings: list[Finding] = []
    for old_field, new_field in shared:
        if old_field.nullable == new_field.nullable:
            continue
        if new_field.nullable:
            findings.append(
                Finding(
                    severity=Severity.SAFE,
                    kind="nullability_changed",
                    message=f"Field '{old_field.name}' is now nullable (less restrictive)",
                    field_name=old_field.name,
                )
            )
        else:
            findings.append(
                Finding(
                    severity=Severity.BREAKING,
                    kind="nullability_changed",
                    message=f"Field '{old_field.name}' changed from nullable to non-nullable",
                    field_name=old_field.name,
                )
            )
    return findings
