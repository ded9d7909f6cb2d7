"""Toolpath generator.

Walks a parsed instruction stream and converts motion commands into
ToolpathSegment objects with path length and duration, then derives the
cumulative step table and bounding box used for playback and framing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property

import numpy as np

from digimill.gcode.modal import ModalState, has_axis_words
from digimill.gcode.parser import Instruction, MotionType, get_param
from digimill.utils.math_helpers import arc_center_from_radius, arc_length, distance_3d

logger = logging.getLogger(__name__)

RAPID_FEED_RATE = 10000.0  # units/min, independent of the machine profile
DEFAULT_FEED_RATE = 100.0  # units/min until the program sets F


@dataclass(frozen=True)
class Point3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z


ORIGIN = Point3D()


@dataclass(frozen=True)
class BoundingBox:
    min: Point3D = ORIGIN
    max: Point3D = ORIGIN

    def expand(self, point: Point3D) -> BoundingBox:
        return BoundingBox(
            min=Point3D(min(self.min.x, point.x), min(self.min.y, point.y), min(self.min.z, point.z)),
            max=Point3D(max(self.max.x, point.x), max(self.max.y, point.y), max(self.max.z, point.z)),
        )

    def contains(self, point: Point3D) -> bool:
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )

    @property
    def size(self) -> Point3D:
        return Point3D(
            self.max.x - self.min.x, self.max.y - self.min.y, self.max.z - self.min.z
        )

    @property
    def center(self) -> Point3D:
        return Point3D(
            (self.min.x + self.max.x) / 2.0,
            (self.min.y + self.max.y) / 2.0,
            (self.min.z + self.max.z) / 2.0,
        )


@dataclass(frozen=True)
class ToolpathSegment:
    """A single straight or circular move of the tool."""

    index: int
    start_point: Point3D
    end_point: Point3D
    motion_type: MotionType
    feed_rate: float  # effective feed used for the duration, units/min
    source_line: int
    distance: float
    duration: float  # seconds


@dataclass(frozen=True)
class SimulationStep:
    """Machine state at the start of a segment (or at the very end)."""

    segment_index: int
    source_line: int
    cumulative_time: float
    cumulative_distance: float
    position: Point3D


@dataclass(frozen=True)
class SimulationData:
    segments: tuple[ToolpathSegment, ...] = ()
    steps: tuple[SimulationStep, ...] = ()
    total_time: float = 0.0
    total_distance: float = 0.0
    bounding_box: BoundingBox = field(default_factory=BoundingBox)

    @classmethod
    def empty(cls) -> SimulationData:
        return cls()

    def step_times(self) -> np.ndarray:
        """Cumulative time of every step as a read-only float array.

        Built once per instance.
        """
        return self._step_times

    @cached_property
    def _step_times(self) -> np.ndarray:
        times = np.fromiter(
            (step.cumulative_time for step in self.steps), dtype=float, count=len(self.steps)
        )
        times.flags.writeable = False
        return times

    def segment_points(self) -> np.ndarray:
        """Segment endpoints as an ``(n, 2, 3)`` array (start, end)."""
        points = np.zeros((len(self.segments), 2, 3), dtype=float)
        for i, seg in enumerate(self.segments):
            points[i, 0] = seg.start_point.as_tuple()
            points[i, 1] = seg.end_point.as_tuple()
        return points

    def segments_for_line(self, source_line: int) -> list[ToolpathSegment]:
        return [seg for seg in self.segments if seg.source_line == source_line]


class ToolpathGenerator:
    """Stateful walker that turns Instructions into toolpath segments.

    Tracks the modal state (position, feed rate, absolute/incremental
    mode) so every motion command can be resolved to concrete geometry.
    The generator accepts any instruction stream; deciding whether a
    program is valid enough to simulate is up to the caller.
    """

    def __init__(self) -> None:
        self.state = ModalState(feed_rate=DEFAULT_FEED_RATE)
        self.segments: list[ToolpathSegment] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Reset all generator state to defaults."""
        self.state = ModalState(feed_rate=DEFAULT_FEED_RATE)
        self.segments = []

    def generate(self, instructions: list[Instruction]) -> SimulationData:
        """Generate the toolpath for a full program.

        Parameters
        ----------
        instructions:
            Ordered instructions, e.g. ``parse(text).instructions``.

        Returns
        -------
        SimulationData with segments, step table, totals and bounding box.
        """
        self.reset()
        for instruction in instructions:
            self.process(instruction)
        data = build_simulation_data(self.segments)
        logger.debug(
            "Generated %d segments: %.3f units in %.3f s",
            len(data.segments), data.total_distance, data.total_time,
        )
        return data

    def process(self, instruction: Instruction) -> ToolpathSegment | None:
        """Apply one instruction; return the segment it produced, if any."""
        cmd = instruction.command_string
        state = self.state

        if cmd in ("G90", "G91"):
            state.apply_mode(cmd)
            return None

        f = get_param(instruction, "F")
        if f is not None and f > 0:
            state.feed_rate = f

        motion = instruction.motion_type
        if motion is None or not has_axis_words(instruction):
            return None

        if motion.is_arc and not any(instruction.has_param(k) for k in "IJR"):
            # No arc definition: nothing can be resolved for this line
            return None

        start = state.position
        end = state.resolve_target(instruction)

        if motion.is_arc:
            distance = self._arc_distance(instruction, start, end, motion)
        else:
            distance = distance_3d(start, end)

        state.move_to(end)
        if distance <= 0.0:
            return None

        feed = RAPID_FEED_RATE if motion is MotionType.RAPID else state.feed_rate
        segment = ToolpathSegment(
            index=len(self.segments),
            start_point=Point3D(*start),
            end_point=Point3D(*end),
            motion_type=motion,
            feed_rate=feed,
            source_line=instruction.source_line,
            distance=distance,
            duration=distance / feed * 60.0,
        )
        self.segments.append(segment)
        return segment

    # ------------------------------------------------------------------
    # Geometry (private)
    # ------------------------------------------------------------------

    @staticmethod
    def _arc_distance(
        instruction: Instruction,
        start: tuple[float, float, float],
        end: tuple[float, float, float],
        motion: MotionType,
    ) -> float:
        clockwise = motion is MotionType.CW_ARC
        i = get_param(instruction, "I")
        j = get_param(instruction, "J")
        r = get_param(instruction, "R")

        if i is None and j is None and r is not None:
            center = arc_center_from_radius(start[0], start[1], end[0], end[1], r, clockwise)
        else:
            center = (start[0] + (i or 0.0), start[1] + (j or 0.0))
        return arc_length(start, end, center, clockwise)


def build_simulation_data(segments: list[ToolpathSegment]) -> SimulationData:
    """Derive the step table, totals and bounding box from *segments*."""
    steps: list[SimulationStep] = []
    cumulative_time = 0.0
    cumulative_distance = 0.0
    bbox = BoundingBox()

    for seg in segments:
        steps.append(
            SimulationStep(
                segment_index=seg.index,
                source_line=seg.source_line,
                cumulative_time=cumulative_time,
                cumulative_distance=cumulative_distance,
                position=seg.start_point,
            )
        )
        cumulative_time += seg.duration
        cumulative_distance += seg.distance
        bbox = bbox.expand(seg.start_point).expand(seg.end_point)

    # Terminal step at the end of the last segment
    if segments:
        last = segments[-1]
        steps.append(
            SimulationStep(
                segment_index=last.index,
                source_line=last.source_line,
                cumulative_time=cumulative_time,
                cumulative_distance=cumulative_distance,
                position=last.end_point,
            )
        )

    return SimulationData(
        segments=tuple(segments),
        steps=tuple(steps),
        total_time=cumulative_time,
        total_distance=cumulative_distance,
        bounding_box=bbox,
    )


def generate_toolpath(instructions: list[Instruction]) -> SimulationData:
    """Generate a toolpath with a fresh :class:`ToolpathGenerator`."""
    return ToolpathGenerator().generate(instructions)
