"""MachineProfile — constraint set for a 3-axis CNC mill."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ProfileError(ValueError):
    """Raised when a machine profile mapping cannot be turned into a profile."""


class Units(Enum):
    MM = "mm"
    INCH = "inch"


@dataclass(frozen=True)
class AxisLimits:
    """Travel limits of a single linear axis (inclusive)."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class AxesLimits:
    x: AxisLimits = AxisLimits(0.0, 200.0)
    y: AxisLimits = AxisLimits(0.0, 200.0)
    z: AxisLimits = AxisLimits(-50.0, 100.0)

    def for_axis(self, axis: str) -> AxisLimits:
        return getattr(self, axis.lower())


_DEFAULT_G_CODES = frozenset({
    "G0", "G1", "G2", "G3",
    "G17", "G18", "G19",
    "G20", "G21",
    "G28",
    "G40", "G41", "G42",
    "G43", "G49",
    "G54", "G55", "G56", "G57", "G58", "G59",
    "G80", "G81", "G82", "G83",
    "G90", "G91",
    "G94", "G95",
})

_DEFAULT_M_CODES = frozenset({
    "M0", "M1", "M2",
    "M3", "M4", "M5",
    "M6",
    "M7", "M8", "M9",
    "M30",
})


@dataclass(frozen=True)
class MachineProfile:
    """Hard constraints a G-code program is validated against.

    An empty ``supported_g_codes`` / ``supported_m_codes`` set means the
    machine accepts every command of that letter.
    """

    # --- Identity ---
    name: str = "Default 3-Axis CNC"
    units: Units = Units.MM

    # --- Travel (in profile units) ---
    axes: AxesLimits = field(default_factory=AxesLimits)

    # --- Speeds ---
    max_feed_rate: float = 5000.0  # units/min
    max_spindle_speed: float = 24000.0  # RPM

    # --- Command vocabulary ---
    supported_g_codes: frozenset[str] = _DEFAULT_G_CODES
    supported_m_codes: frozenset[str] = _DEFAULT_M_CODES

    def supported_codes(self, letter: str) -> frozenset[str]:
        """Return the support set for command *letter* (``"G"`` or ``"M"``)."""
        if letter == "G":
            return self.supported_g_codes
        if letter == "M":
            return self.supported_m_codes
        return frozenset()

    def with_updates(self, **changes: Any) -> MachineProfile:
        """Return a copy of the profile with *changes* applied."""
        for key in ("supported_g_codes", "supported_m_codes"):
            if key in changes:
                changes[key] = _codes(changes[key], key)
        if "units" in changes:
            changes["units"] = _coerce_units(changes["units"])
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Mapping conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MachineProfile:
        """Build a profile from a JSON-style mapping.

        Both the camelCase keys used by profile files (``maxFeedRate``,
        ``supportedGCodes``, ...) and snake_case keys are accepted. Keys
        that are missing fall back to :data:`DEFAULT_PROFILE`.
        """
        if not isinstance(data, Mapping):
            raise ProfileError("Machine profile must be a mapping")

        base = DEFAULT_PROFILE
        axes_data = data.get("axes", {})
        if not isinstance(axes_data, Mapping):
            raise ProfileError("'axes' must be a mapping of x/y/z limits")

        axes = AxesLimits(
            x=_axis_from(axes_data.get("x"), base.axes.x, "x"),
            y=_axis_from(axes_data.get("y"), base.axes.y, "y"),
            z=_axis_from(axes_data.get("z"), base.axes.z, "z"),
        )

        return cls(
            name=str(data.get("name", base.name)),
            units=_coerce_units(data.get("units", base.units)),
            axes=axes,
            max_feed_rate=_number(
                _pick(data, "maxFeedRate", "max_feed_rate", base.max_feed_rate),
                "maxFeedRate",
            ),
            max_spindle_speed=_number(
                _pick(data, "maxSpindleSpeed", "max_spindle_speed", base.max_spindle_speed),
                "maxSpindleSpeed",
            ),
            supported_g_codes=_codes(
                _pick(data, "supportedGCodes", "supported_g_codes", base.supported_g_codes),
                "supportedGCodes",
            ),
            supported_m_codes=_codes(
                _pick(data, "supportedMCodes", "supported_m_codes", base.supported_m_codes),
                "supportedMCodes",
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the camelCase mapping accepted by :meth:`from_dict`."""
        return {
            "name": self.name,
            "units": self.units.value,
            "axes": {
                axis: {"min": limits.min, "max": limits.max}
                for axis, limits in (
                    ("x", self.axes.x),
                    ("y", self.axes.y),
                    ("z", self.axes.z),
                )
            },
            "maxFeedRate": self.max_feed_rate,
            "maxSpindleSpeed": self.max_spindle_speed,
            "supportedGCodes": sorted(self.supported_g_codes, key=_code_sort_key),
            "supportedMCodes": sorted(self.supported_m_codes, key=_code_sort_key),
        }


def _pick(data: Mapping[str, Any], camel: str, snake: str, default: Any) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ProfileError(f"'{key}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ProfileError(f"'{key}' must be a number, got {value!r}") from exc


def _axis_from(value: Any, default: AxisLimits, axis: str) -> AxisLimits:
    if value is None:
        return default
    if not isinstance(value, Mapping):
        raise ProfileError(f"Limits for axis '{axis}' must be a mapping")
    lo = _number(value.get("min", default.min), f"axes.{axis}.min")
    hi = _number(value.get("max", default.max), f"axes.{axis}.max")
    if lo > hi:
        raise ProfileError(f"Axis '{axis}' has min {lo} greater than max {hi}")
    return AxisLimits(lo, hi)


def _codes(value: Any, key: str) -> frozenset[str]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ProfileError(f"'{key}' must be a list of command strings")
    return frozenset(_normalize_code(code) for code in value)


def _normalize_code(code: Any) -> str:
    # "G01" and "G1" name the same command
    text = str(code).strip().upper()
    digits = text[1:]
    if digits.isascii() and digits.isdigit():
        return f"{text[0]}{int(digits)}"
    return text


def _coerce_units(value: Any) -> Units:
    if isinstance(value, Units):
        return value
    try:
        return Units(str(value).lower())
    except ValueError as exc:
        raise ProfileError(f"Unknown units {value!r}; expected 'mm' or 'inch'") from exc


def _code_sort_key(code: str) -> tuple[str, int]:
    digits = code[1:]
    return code[:1], int(digits) if digits.isdigit() else -1


# Singleton default profile
DEFAULT_PROFILE = MachineProfile()
