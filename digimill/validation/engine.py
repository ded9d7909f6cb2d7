"""Validation engine.

Runs every rule against each instruction of a program, in document
order, and produces a sorted diagnostic list.
"""

from __future__ import annotations

import logging

from digimill.config import DEFAULT_PROFILE, MachineProfile
from digimill.gcode.parser import Instruction, ParseError
from digimill.validation.diagnostics import Diagnostic, Severity, ValidationResult
from digimill.validation.rules import ALL_RULES, advance_state, create_initial_state

logger = logging.getLogger(__name__)


def validate(
    instructions: list[Instruction],
    profile: MachineProfile = DEFAULT_PROFILE,
) -> ValidationResult:
    """Validate *instructions* against *profile*.

    A single forward pass: each rule sees the modal state as it was
    before the instruction, then the state is advanced. Blank and
    comment-only instructions are skipped.
    """
    diagnostics: list[Diagnostic] = []
    state = create_initial_state(profile)

    for instruction in instructions:
        if instruction.is_empty:
            continue

        for rule in ALL_RULES:
            diagnostics.extend(rule(instruction, profile, state))

        advance_state(state, instruction)

    result = ValidationResult.from_diagnostics(diagnostics)
    logger.debug(
        "Validated %d instructions against %r: %d errors, %d warnings",
        len(instructions), profile.name, result.error_count, result.warning_count,
    )
    return result


def parse_error_diagnostics(errors: list[ParseError]) -> list[Diagnostic]:
    """Convert lexical errors into ``parse-error`` diagnostics."""
    return [
        Diagnostic(
            severity=Severity.ERROR,
            line=error.line,
            column=error.column,
            end_column=error.end_column,
            message=error.message,
            rule_id="parse-error",
        )
        for error in errors
    ]


def merge_parse_errors(
    result: ValidationResult, errors: list[ParseError]
) -> ValidationResult:
    """Fold *errors* into *result*, re-sorting and recounting."""
    if not errors:
        return result
    return ValidationResult.from_diagnostics(
        parse_error_diagnostics(errors) + list(result.diagnostics)
    )
