#!/usr/bin/env python3
"""Benchmark the parse / validate / toolpath pipeline."""

import time
import argparse

from digimill.config import DEFAULT_PROFILE
from digimill.gcode.library import raster_gcode
from digimill.gcode.parser import parse
from digimill.simulation.playback import step_index_at
from digimill.simulation.toolpath import generate_toolpath
from digimill.validation.engine import validate


def benchmark_stage(label: str, func, repeat: int) -> float:
    start = time.perf_counter()
    for _ in range(repeat):
        result = func()
    elapsed = (time.perf_counter() - start) / repeat
    print(f"  {label:<12} {elapsed * 1000.0:8.2f} ms")
    return result


def main():
    parser = argparse.ArgumentParser(description="Benchmark digimill pipeline")
    parser.add_argument("--repeat", type=int, default=20)
    parser.add_argument("--stepover", type=float, default=0.1,
                        help="raster stepover in mm (smaller = longer program)")
    args = parser.parse_args()

    text = raster_gcode(stepover_mm=args.stepover)
    print("=" * 60)
    print("digimill Pipeline Benchmark")
    print("=" * 60)
    print(f"\nProgram: {text.count(chr(10))} lines, {args.repeat} repetitions")

    parsed = benchmark_stage("parse", lambda: parse(text), args.repeat)
    benchmark_stage("validate", lambda: validate(parsed.instructions, DEFAULT_PROFILE), args.repeat)
    data = benchmark_stage("toolpath", lambda: generate_toolpath(parsed.instructions), args.repeat)

    queries = [data.total_time * k / 1000.0 for k in range(1001)]
    benchmark_stage("1k lookups", lambda: [step_index_at(data, t) for t in queries], args.repeat)

    print(f"\n  Segments: {len(data.segments)}")
    print(f"  Machining time: {data.total_time:.1f} s")
    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
