"""Modal machine state tracked while walking an instruction stream."""

from __future__ import annotations

from dataclasses import dataclass

from digimill.config import Units
from digimill.gcode.parser import Instruction, get_param


@dataclass
class ModalState:
    """Position, feed rate and mode flags that persist across instructions.

    Validation and toolpath generation each build their own instance per
    run; it is never shared between runs.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    feed_rate: float = 0.0
    absolute_mode: bool = True  # G90 / G91
    units: Units = Units.MM  # G21 / G20

    @property
    def position(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z

    def resolve_target(self, instruction: Instruction) -> tuple[float, float, float]:
        """Return the X/Y/Z target of *instruction* from the current state.

        Unspecified axes keep their current value; specified ones are
        absolute or incremental depending on ``absolute_mode``.
        """
        return (
            self._resolve_axis(get_param(instruction, "X"), self.x),
            self._resolve_axis(get_param(instruction, "Y"), self.y),
            self._resolve_axis(get_param(instruction, "Z"), self.z),
        )

    def _resolve_axis(self, value: float | None, current: float) -> float:
        if value is None:
            return current
        return value if self.absolute_mode else current + value

    def apply_mode(self, command: str | None) -> bool:
        """Apply a distance-mode or units command. Returns True if handled."""
        if command == "G90":
            self.absolute_mode = True
        elif command == "G91":
            self.absolute_mode = False
        elif command == "G20":
            self.units = Units.INCH
        elif command == "G21":
            self.units = Units.MM
        else:
            return False
        return True

    def move_to(self, target: tuple[float, float, float]) -> None:
        self.x, self.y, self.z = target


def has_axis_words(instruction: Instruction) -> bool:
    return any(get_param(instruction, axis) is not None for axis in "XYZ")
