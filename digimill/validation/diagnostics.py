"""Diagnostic records produced by validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(frozen=True)
class Diagnostic:
    """A single finding tied to a source line."""

    severity: Severity
    line: int  # 1-based
    column: int
    end_column: int
    message: str
    rule_id: str

    def __str__(self) -> str:
        return f"Line {self.line}: {self.severity.value}: {self.message} [{self.rule_id}]"


def sort_diagnostics(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    """Stable sort by line, then severity (error < warning < info)."""
    return sorted(diagnostics, key=lambda d: (d.line, d.severity.rank))


@dataclass(frozen=True)
class ValidationResult:
    diagnostics: tuple[Diagnostic, ...]
    error_count: int
    warning_count: int
    info_count: int

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    @classmethod
    def from_diagnostics(cls, diagnostics: list[Diagnostic]) -> ValidationResult:
        """Sort *diagnostics* and count them per severity."""
        ordered = sort_diagnostics(diagnostics)
        return cls(
            diagnostics=tuple(ordered),
            error_count=sum(1 for d in ordered if d.severity is Severity.ERROR),
            warning_count=sum(1 for d in ordered if d.severity is Severity.WARNING),
            info_count=sum(1 for d in ordered if d.severity is Severity.INFO),
        )

    def for_line(self, line: int) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.line == line]
