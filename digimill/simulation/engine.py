"""Pipeline orchestration: text -> parse -> validate -> toolpath."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from digimill.config import DEFAULT_PROFILE, MachineProfile
from digimill.gcode.parser import ParseResult, parse
from digimill.simulation.playback import PlaybackController
from digimill.simulation.toolpath import SimulationData, generate_toolpath
from digimill.validation.diagnostics import ValidationResult
from digimill.validation.engine import merge_parse_errors, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything derived from one ``(text, profile)`` pair."""

    parse_result: ParseResult
    validation: ValidationResult
    simulation: SimulationData

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def analyze(text: str, profile: MachineProfile = DEFAULT_PROFILE) -> AnalysisResult:
    """Run the full pipeline on *text*.

    Parse errors are folded into the diagnostics as ``parse-error``
    entries. The toolpath is generated only when there are no errors at
    all; warnings do not block it.
    """
    parse_result = parse(text)
    validation = merge_parse_errors(
        validate(parse_result.instructions, profile), parse_result.errors
    )

    if validation.is_valid:
        simulation = generate_toolpath(parse_result.instructions)
    else:
        logger.debug(
            "Skipping toolpath generation: %d error(s) in program", validation.error_count
        )
        simulation = SimulationData.empty()

    return AnalysisResult(
        parse_result=parse_result, validation=validation, simulation=simulation
    )


class SimulationEngine:
    """Holds the current program and profile and keeps derived data fresh.

    Every change to the text or the profile re-runs :func:`analyze` from
    scratch and rewinds playback, so the latest input always wins.

    Typical usage::

        engine = SimulationEngine()
        engine.load_gcode(gcode_text)
        engine.playback.play()
        while not engine.done:
            engine.playback.tick(1 / 60)
    """

    def __init__(self, profile: MachineProfile = DEFAULT_PROFILE) -> None:
        self.profile = profile
        self.text: str = ""
        self.playback = PlaybackController()
        self.result: AnalysisResult = self._recompute()

    # ------------------------------------------------------------------ #
    #  Inputs                                                             #
    # ------------------------------------------------------------------ #

    def load_gcode(self, gcode_text: str) -> AnalysisResult:
        """Replace the program text and recompute.

        Returns
        -------
        AnalysisResult
            The fresh analysis for the new text.
        """
        self.text = gcode_text
        return self._recompute()

    def set_profile(self, profile: MachineProfile) -> AnalysisResult:
        self.profile = profile
        return self._recompute()

    def update_profile(self, **changes: Any) -> AnalysisResult:
        """Apply *changes* to the current profile and recompute."""
        return self.set_profile(self.profile.with_updates(**changes))

    # ------------------------------------------------------------------ #
    #  Derived views                                                      #
    # ------------------------------------------------------------------ #

    @property
    def simulation(self) -> SimulationData:
        return self.result.simulation

    @property
    def diagnostics(self):
        return self.result.validation.diagnostics

    @property
    def done(self) -> bool:
        """True when playback has reached the end (or there is nothing to play)."""
        return not self.simulation.steps or self.playback.finished

    def _recompute(self) -> AnalysisResult:
        self.result = analyze(self.text, self.profile)
        self.playback.load(self.result.simulation)
        return self.result
