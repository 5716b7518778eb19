#!/usr/bin/env python3

"""Run the test suite with coverage and write a shields.io endpoint badge."""

import json
import subprocess
import sys
from pathlib import Path

THRESHOLDS = [(80, "green"), (60, "yellow")]


def badge_color(pct: int) -> str:
    for minimum, color in THRESHOLDS:
        if pct >= minimum:
            return color
    return "red"


def main() -> int:
    # Coverage output lives in .geeto/ next to the wizard state
    output_dir = Path(".geeto")
    output_dir.mkdir(exist_ok=True)
    coverage_json = output_dir / "coverage.json"

    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "--cov=geeto", f"--cov-report=json:{coverage_json}", "-q"],
        capture_output=True,
        text=True,
    )

    try:
        with open(coverage_json) as f:
            pct = round(json.load(f)["totals"]["percent_covered"])
    except (FileNotFoundError, KeyError, json.JSONDecodeError):
        print(f"Could not read {coverage_json}")
        print(result.stdout[-2000:])
        return 1

    color = badge_color(pct)
    badge = {"schemaVersion": 1, "label": "coverage", "message": f"{pct}%", "color": color}
    Path("coverage-badge.json").write_text(json.dumps(badge, indent=2) + "\n")

    print(f"Coverage badge: {pct}% ({color})")
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
