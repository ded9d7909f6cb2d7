"""Validation rules for G-code instructions against a machine profile.

Every rule is a plain function ``(instruction, profile, state) ->
list[Diagnostic]`` that returns an empty list for instructions it does not
concern. Rules only read the modal state; the engine advances it with
:func:`advance_state` after all rules have run.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from digimill.config import MachineProfile
from digimill.gcode.modal import ModalState
from digimill.gcode.parser import Instruction, MotionType, format_number, get_param
from digimill.validation.diagnostics import Diagnostic, Severity


class RuleKind(Enum):
    UNSUPPORTED_COMMAND = "unsupported-command"
    OUT_OF_BOUNDS = "out-of-bounds"
    MISSING_FEED_RATE = "missing-feed-rate"
    FEED_RATE = "feed-rate"
    SPINDLE_SPEED = "spindle-speed-exceeded"
    ARC_PARAMETERS = "arc-missing-params"


ValidationRule = Callable[[Instruction, MachineProfile, ModalState], list[Diagnostic]]

_CUTTING_MOTIONS = (MotionType.LINEAR, MotionType.CW_ARC, MotionType.CCW_ARC)
_SPINDLE_ON = ("M3", "M4")


def create_initial_state(profile: MachineProfile) -> ModalState:
    """Power-on validation state: origin, no feed rate, absolute mode."""
    return ModalState(feed_rate=0.0, absolute_mode=True, units=profile.units)


def _diagnostic(
    instruction: Instruction, severity: Severity, message: str, rule_id: str
) -> Diagnostic:
    return Diagnostic(
        severity=severity,
        line=instruction.source_line,
        column=0,
        end_column=len(instruction.raw),
        message=message,
        rule_id=rule_id,
    )


# ----------------------------------------------------------------------
# Rules
# ----------------------------------------------------------------------


def unsupported_command(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    cmd = instruction.command_string
    if cmd is None:
        return []

    supported = profile.supported_codes(cmd[0])
    if supported and cmd not in supported:
        return [
            _diagnostic(
                instruction, Severity.ERROR,
                f"Unsupported command: {cmd}",
                "unsupported-command",
            )
        ]
    return []


def out_of_bounds(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    if instruction.motion_type is None:
        return []

    diagnostics: list[Diagnostic] = []
    target = state.resolve_target(instruction)
    for axis, value in zip("xyz", target):
        limits = profile.axes.for_axis(axis)
        if not limits.contains(value):
            diagnostics.append(
                _diagnostic(
                    instruction, Severity.ERROR,
                    f"{axis.upper()} position {format_number(value)} is out of bounds "
                    f"[{format_number(limits.min)}, {format_number(limits.max)}]",
                    f"out-of-bounds-{axis}",
                )
            )
    return diagnostics


def missing_feed_rate(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    if instruction.motion_type not in _CUTTING_MOTIONS:
        return []

    if get_param(instruction, "F") is None and state.feed_rate <= 0:
        return [
            _diagnostic(
                instruction, Severity.WARNING,
                "No feed rate specified for cutting move, F value required",
                "missing-feed-rate",
            )
        ]
    return []


def feed_rate_limits(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    f = get_param(instruction, "F")
    if f is None:
        return []

    if f > profile.max_feed_rate:
        return [
            _diagnostic(
                instruction, Severity.WARNING,
                f"Feed rate F{format_number(f)} exceeds maximum "
                f"{format_number(profile.max_feed_rate)} {profile.units.value}/min",
                "feed-rate-exceeded",
            )
        ]
    if f <= 0:
        return [
            _diagnostic(
                instruction, Severity.ERROR,
                "Feed rate must be positive",
                "invalid-feed-rate",
            )
        ]
    return []


def spindle_speed_exceeded(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    if instruction.command_string not in _SPINDLE_ON:
        return []

    s = get_param(instruction, "S")
    if s is not None and s > profile.max_spindle_speed:
        return [
            _diagnostic(
                instruction, Severity.WARNING,
                f"Spindle speed S{format_number(s)} exceeds maximum "
                f"{format_number(profile.max_spindle_speed)} RPM",
                "spindle-speed-exceeded",
            )
        ]
    return []


def arc_missing_params(
    instruction: Instruction, profile: MachineProfile, state: ModalState
) -> list[Diagnostic]:
    if instruction.motion_type is None or not instruction.motion_type.is_arc:
        return []

    if not any(instruction.has_param(letter) for letter in "IJR"):
        return [
            _diagnostic(
                instruction, Severity.ERROR,
                "Arc move requires I/J center offsets or R radius",
                "arc-missing-params",
            )
        ]
    return []


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------

RULES: dict[RuleKind, ValidationRule] = {
    RuleKind.UNSUPPORTED_COMMAND: unsupported_command,
    RuleKind.OUT_OF_BOUNDS: out_of_bounds,
    RuleKind.MISSING_FEED_RATE: missing_feed_rate,
    RuleKind.FEED_RATE: feed_rate_limits,
    RuleKind.SPINDLE_SPEED: spindle_speed_exceeded,
    RuleKind.ARC_PARAMETERS: arc_missing_params,
}

ALL_RULES: list[ValidationRule] = list(RULES.values())


def advance_state(state: ModalState, instruction: Instruction) -> None:
    """Apply *instruction* to *state* in place."""
    # Target uses the mode in effect before this instruction
    target = state.resolve_target(instruction)

    state.apply_mode(instruction.command_string)

    f = get_param(instruction, "F")
    if f is not None:
        state.feed_rate = f

    if instruction.motion_type is not None:
        state.move_to(target)
