#!/usr/bin/env python3
"""Validate a G-code file and report toolpath totals."""

import argparse
import json
import logging
import sys
from pathlib import Path

from digimill.config import DEFAULT_PROFILE, MachineProfile, ProfileError
from digimill.simulation.engine import analyze


def load_profile(path: str | None) -> MachineProfile:
    if path is None:
        return DEFAULT_PROFILE
    with open(path, encoding="utf-8") as fh:
        return MachineProfile.from_dict(json.load(fh))


def main() -> int:
    parser = argparse.ArgumentParser(description="Check a G-code program against a machine profile")
    parser.add_argument("path", help="G-code file (.gcode, .nc, .ngc, .txt)")
    parser.add_argument("--profile", help="machine profile JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        profile = load_profile(args.profile)
    except (OSError, json.JSONDecodeError, ProfileError) as exc:
        print(f"Cannot load profile: {exc}", file=sys.stderr)
        return 2

    text = Path(args.path).read_text(encoding="utf-8")
    result = analyze(text, profile)
    validation = result.validation

    for diagnostic in validation.diagnostics:
        print(diagnostic)

    print("-" * 60)
    print(f"Profile:  {profile.name}")
    print(f"Lines:    {result.parse_result.line_count}")
    print(
        f"Errors:   {validation.error_count}  "
        f"Warnings: {validation.warning_count}  Info: {validation.info_count}"
    )

    if not validation.is_valid:
        print("Program is invalid; no toolpath generated.")
        return 1

    sim = result.simulation
    bbox = sim.bounding_box
    print(f"Segments: {len(sim.segments)}")
    print(f"Distance: {sim.total_distance:.3f} {profile.units.value}")
    print(f"Time:     {sim.total_time:.2f} s")
    print(
        f"Extents:  X[{bbox.min.x:g}, {bbox.max.x:g}] "
        f"Y[{bbox.min.y:g}, {bbox.max.y:g}] Z[{bbox.min.z:g}, {bbox.max.z:g}]"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
