# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for extracted data classes and compatibility findings."""

from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from enum import IntEnum
from typing import Any, Iterable, Literal


class Severity(IntEnum):
    """Closed severity set, ordered so that ``max()`` yields the worst one."""

    SAFE = 0
    WARNING = 1
    BREAKING = 2


FindingKind = Literal[
    "field_added",
    "field_moved",
    "field_removed",
    "type_changed",
    "nullability_changed",
    "record_removed",
]

RecordStatus = Literal["compared", "removed", "added"]


@dataclass(frozen=True)
class FieldDescriptor:
    """Represent one constructor property of a data class.

    Attributes:
        name: Property identifier.
        type: Raw type expression without the trailing ``?`` marker.
        nullable: Whether the type expression is marked optional.
        has_default: Whether the declaration supplies a default value.
        position: Zero-based index within the owning record.
    """

    name: str
    type: str
    nullable: bool
    has_default: bool
    position: int


@dataclass(frozen=True)
class RecordDescriptor:
    """Represent one data class with its ordered fields.

    Attributes:
        name: Data class identifier.
        fields: Fields in declaration order.
        source: Label of the file the record was extracted from; empty when
            comparing single files. Not part of record equality.

    Raises:
        ValueError: If a field position does not match its index or a field
            name is declared twice.
    """

    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    source: str = dataclass_field(default="", compare=False)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for index, field in enumerate(self.fields):
            if field.position != index:
                raise ValueError(
                    f"Field '{field.name}' of '{self.name}' has position "
                    f"{field.position}, expected {index}."
                )
            if field.name in seen:
                raise ValueError(f"Field '{field.name}' of '{self.name}' is not unique.")
            seen.add(field.name)

    @classmethod
    def build(
        cls, name: str, fields: Iterable[FieldDescriptor], source: str = ""
    ) -> "RecordDescriptor":
        """Create a record, deriving positions from sequence order."""
        return cls(
            name=name,
            fields=tuple(
                replace(field, position=index) for index, field in enumerate(fields)
            ),
            source=source,
        )

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    def field_by_name(self) -> dict[str, FieldDescriptor]:
        return {field.name: field for field in self.fields}


@dataclass(frozen=True)
class Finding:
    """Represent one classified difference between two record versions."""

    severity: Severity
    kind: FindingKind
    message: str
    field_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.name,
            "kind": self.kind,
            "message": self.message,
            "field_name": self.field_name,
        }


@dataclass(frozen=True)
class RecordComparison:
    """Represent the outcome for one data class name across versions.

    Attributes:
        name: Data class identifier.
        status: ``compared`` when present in both versions, ``removed`` when
            only in the old version, ``added`` when only in the new one.
        findings: Findings in rule order.
        old_source: Source label of the old record, if any.
        new_source: Source label of the new record, if any.
    """

    name: str
    status: RecordStatus
    findings: tuple[Finding, ...] = ()
    old_source: str | None = None
    new_source: str | None = None

    @property
    def has_breaking_changes(self) -> bool:
        return any(f.severity is Severity.BREAKING for f in self.findings)

    @property
    def highest_severity(self) -> Severity | None:
        if not self.findings:
            return None
        return max(finding.severity for finding in self.findings)

    @property
    def location(self) -> str:
        """Describe where the record lives, e.g. ``a.kt -> b.kt`` after a move."""
        sources = [s for s in (self.old_source, self.new_source) if s]
        if len(sources) == 2 and sources[0] != sources[1]:
            return f"{sources[0]} -> {sources[1]}"
        return sources[0] if sources else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "old_source": self.old_source,
            "new_source": self.new_source,
            "findings": [finding.to_dict() for finding in self.findings],
        }


@dataclass(frozen=True)
class SourceComparison:
    """Represent record comparisons for one old/new source pair."""

    label: str
    old_records: tuple[RecordDescriptor, ...]
    new_records: tuple[RecordDescriptor, ...]
    comparisons: tuple[RecordComparison, ...]

    @property
    def has_breaking_changes(self) -> bool:
        return any(c.has_breaking_changes for c in self.comparisons)

    @property
    def is_empty(self) -> bool:
        return not self.old_records and not self.new_records

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "comparisons": [comparison.to_dict() for comparison in self.comparisons],
        }


@dataclass(frozen=True)
class CompatibilityReport:
    """Aggregate result of one checker run."""

    sources: tuple[SourceComparison, ...]

    @property
    def has_breaking_changes(self) -> bool:
        return any(source.has_breaking_changes for source in self.sources)

    @property
    def passed(self) -> bool:
        return not self.has_breaking_changes

    @property
    def is_empty(self) -> bool:
        return all(source.is_empty for source in self.sources)

    def to_dict(self, suggestions: Iterable[str] = ()) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "sources": [source.to_dict() for source in self.sources],
            "suggestions": list(suggestions) if not self.passed else [],
        }
