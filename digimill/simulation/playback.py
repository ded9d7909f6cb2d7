"""Playback clock for generated toolpaths.

Maps a continuous elapsed time onto the discrete step table of a
SimulationData so playback and scrubbing do not depend on frame rate.
Resolution is one step per segment; positions are never interpolated
inside a segment.
"""

from __future__ import annotations

import math

import numpy as np

from digimill.simulation.toolpath import Point3D, SimulationData, SimulationStep
from digimill.utils.math_helpers import clamp


def step_index_at(data: SimulationData, elapsed: float) -> int | None:
    """Index of the last step whose cumulative time is <= *elapsed*.

    *elapsed* is clamped to ``[0, total_time]``. At (or past) the end the
    terminal step is returned. ``None`` when there are no steps.
    """
    if not data.steps:
        return None

    last = len(data.steps) - 1
    t = clamp(elapsed, 0.0, data.total_time)
    if t >= data.total_time:
        return last

    times = data.step_times()
    index = int(np.searchsorted(times, t, side="right")) - 1
    return int(np.clip(index, 0, last))


def step_at(data: SimulationData, elapsed: float) -> SimulationStep | None:
    index = step_index_at(data, elapsed)
    return None if index is None else data.steps[index]


def position_at(data: SimulationData, elapsed: float) -> Point3D:
    """Tool position at *elapsed* seconds, at step resolution."""
    step = step_at(data, elapsed)
    return step.position if step is not None else Point3D()


class PlaybackController:
    """Play / pause / scrub controller driven by a time-based clock.

    Typical usage::

        playback = PlaybackController(data)
        playback.play()
        while playback.playing:
            playback.tick(frame_dt)
            draw_up_to(playback.step_index)
    """

    def __init__(self, data: SimulationData | None = None, speed: float = 1.0) -> None:
        self.data: SimulationData = data if data is not None else SimulationData.empty()
        self.speed: float = 1.0
        self.set_speed(speed)
        self.elapsed: float = 0.0
        self.playing: bool = False

    # ------------------------------------------------------------------ #
    #  Transport                                                          #
    # ------------------------------------------------------------------ #

    def load(self, data: SimulationData) -> None:
        """Swap in new simulation data and rewind."""
        self.data = data
        self.stop()

    def play(self) -> None:
        if not self.data.steps:
            return
        if self.finished:
            self.elapsed = 0.0
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def stop(self) -> None:
        """Pause and rewind to the start."""
        self.playing = False
        self.elapsed = 0.0

    def set_speed(self, speed: float) -> None:
        """Set the playback rate as a multiple of real time."""
        if not math.isfinite(speed) or speed < 0.0:
            raise ValueError(f"Playback speed must be finite and non-negative, got {speed}")
        self.speed = float(speed)

    def tick(self, dt: float) -> int | None:
        """Advance the clock by *dt* wall-clock seconds while playing.

        Returns
        -------
        int | None
            The step index after advancing.
        """
        if self.playing and dt > 0.0:
            self.elapsed = clamp(self.elapsed + dt * self.speed, 0.0, self.data.total_time)
            if self.finished:
                self.playing = False
        return self.step_index

    # ------------------------------------------------------------------ #
    #  Stepping                                                           #
    # ------------------------------------------------------------------ #

    def jump_to_step(self, index: int) -> None:
        """Move the clock to the start of step *index* (clamped)."""
        if not self.data.steps:
            return
        index = int(np.clip(index, 0, len(self.data.steps) - 1))
        self.elapsed = self.data.steps[index].cumulative_time

    def step_forward(self) -> None:
        self.playing = False
        current = self.step_index
        if current is not None:
            self.jump_to_step(current + 1)

    def step_backward(self) -> None:
        self.playing = False
        current = self.step_index
        if current is None:
            return
        # Mid-step goes back to the start of the current step first
        if self.elapsed > self.data.steps[current].cumulative_time:
            self.jump_to_step(current)
        else:
            self.jump_to_step(current - 1)

    # ------------------------------------------------------------------ #
    #  Read-only views                                                    #
    # ------------------------------------------------------------------ #

    @property
    def step_index(self) -> int | None:
        return step_index_at(self.data, self.elapsed)

    @property
    def current_step(self) -> SimulationStep | None:
        index = self.step_index
        return None if index is None else self.data.steps[index]

    @property
    def position(self) -> Point3D:
        return position_at(self.data, self.elapsed)

    @property
    def progress(self) -> float:
        """Fraction of total time elapsed, 0.0 for an empty toolpath."""
        if self.data.total_time <= 0.0:
            return 0.0
        return clamp(self.elapsed / self.data.total_time, 0.0, 1.0)

    @property
    def finished(self) -> bool:
        return bool(self.data.steps) and self.elapsed >= self.data.total_time
