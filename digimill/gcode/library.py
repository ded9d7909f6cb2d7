"""Sample G-code programs.

Provides functions that return ready-to-use milling programs for demos,
tests and benchmarks without requiring external .nc files. Every program
stays inside the travel of :data:`digimill.config.DEFAULT_PROFILE`.
"""

from __future__ import annotations

import math

SAMPLE_PROGRAM = """\
; Sample Program
; 3-axis CNC milling example
G21 ; Set units to millimeters
G90 ; Absolute positioning
G17 ; XY plane selection

; Spindle on
M3 S12000

; Rapid to start position
G0 X10 Y10 Z5

; Plunge
G1 Z-2 F200

; Cut a square
G1 X50 F800
G1 Y50
G1 X10
G1 Y10

; Retract
G0 Z5

; Rapid to second position
G0 X70 Y20

; Plunge
G1 Z-2 F200

; Cut a triangle
G1 X110 F800
G1 X90 Y60
G1 X70 Y20

; Retract and home
G0 Z10
G0 X0 Y0

; Spindle off
M5
M2 ; End program
"""


def sample_program() -> str:
    """The demo program shown when nothing else is loaded."""
    return SAMPLE_PROGRAM


def square_pocket_gcode(
    size_mm: float = 40.0,
    depth_mm: float = 3.0,
    step_down_mm: float = 1.0,
    feed_rate: float = 800.0,
    plunge_rate: float = 200.0,
    origin: tuple[float, float] = (20.0, 20.0),
) -> str:
    """Generate a square profile cut in several depth passes.

    Parameters
    ----------
    size_mm:
        Side length of the square in mm.
    depth_mm:
        Final cut depth below Z0 in mm.
    step_down_mm:
        Depth of each pass in mm.
    feed_rate:
        Cutting feed in mm/min.
    plunge_rate:
        Z plunge feed in mm/min.
    origin:
        Lower-left corner of the square.

    Returns
    -------
    Multi-line G-code string.
    """
    ox, oy = origin
    passes = max(1, math.ceil(depth_mm / step_down_mm))

    lines: list[str] = [
        "; Square profile",
        f"; Size: {size_mm} mm, Depth: {depth_mm} mm, Passes: {passes}",
        "G21 G90 G17",
        "M3 S10000",
        "G0 Z5",
        f"G0 X{ox:.3f} Y{oy:.3f}",
    ]

    for n in range(1, passes + 1):
        z = -min(depth_mm, n * step_down_mm)
        lines.append(f"; Pass {n}")
        lines.append(f"G1 Z{z:.3f} F{plunge_rate:.0f}")
        lines.append(f"G1 X{ox + size_mm:.3f} F{feed_rate:.0f}")
        lines.append(f"G1 Y{oy + size_mm:.3f}")
        lines.append(f"G1 X{ox:.3f}")
        lines.append(f"G1 Y{oy:.3f}")

    lines += [
        "G0 Z5",
        "M5",
        "M30",
    ]
    return "\n".join(lines) + "\n"


def circle_gcode(
    radius_mm: float = 15.0,
    center: tuple[float, float] = (100.0, 100.0),
    depth_mm: float = 1.0,
    feed_rate: float = 600.0,
    clockwise: bool = True,
) -> str:
    """Generate a full circle cut with a single G2/G3 arc.

    The arc starts and ends at the same point, so it sweeps a full turn.
    """
    cx, cy = center
    start_x = cx - radius_mm
    arc = "G2" if clockwise else "G3"

    lines: list[str] = [
        "; Circle",
        "G21 G90",
        "M3 S12000",
        "G0 Z5",
        f"G0 X{start_x:.3f} Y{cy:.3f}",
        f"G1 Z{-depth_mm:.3f} F200",
        f"{arc} X{start_x:.3f} Y{cy:.3f} I{radius_mm:.3f} J0 F{feed_rate:.0f}",
        "G0 Z5",
        "M5",
        "M30",
    ]
    return "\n".join(lines) + "\n"


def helix_gcode(
    radius_mm: float = 10.0,
    center: tuple[float, float] = (100.0, 100.0),
    turns: int = 3,
    pitch_mm: float = 1.0,
    feed_rate: float = 500.0,
) -> str:
    """Generate a helical bore: full CCW turns descending *pitch_mm* each."""
    cx, cy = center
    start_x = cx + radius_mm

    lines: list[str] = [
        "; Helical bore",
        "G21 G90",
        "M3 S15000",
        "G0 Z2",
        f"G0 X{start_x:.3f} Y{cy:.3f}",
        "G1 Z0 F200",
    ]
    for turn in range(1, turns + 1):
        lines.append(
            f"G3 X{start_x:.3f} Y{cy:.3f} Z{-turn * pitch_mm:.3f} "
            f"I{-radius_mm:.3f} J0 F{feed_rate:.0f}"
        )
    lines += ["G0 Z5", "M5", "M30"]
    return "\n".join(lines) + "\n"


def raster_gcode(
    width_mm: float = 150.0,
    height_mm: float = 150.0,
    stepover_mm: float = 2.0,
    feed_rate: float = 1500.0,
) -> str:
    """Generate a zig-zag facing pass; handy for benchmarking long programs."""
    rows = max(1, int(height_mm / stepover_mm))
    lines: list[str] = [
        "; Raster facing",
        "G21 G90",
        "M3 S18000",
        "G0 Z5",
        "G0 X0 Y0",
        "G1 Z-0.5 F300",
    ]
    for row in range(rows + 1):
        y = min(row * stepover_mm, height_mm)
        x = width_mm if row % 2 == 0 else 0.0
        lines.append(f"G1 Y{y:.3f} F{feed_rate:.0f}")
        lines.append(f"G1 X{x:.3f}")
    lines += ["G0 Z5", "M5", "M30"]
    return "\n".join(lines) + "\n"
