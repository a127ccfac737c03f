#!/usr/bin/env python3
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.discgrid.layout.grid import YearGroup, compute_grid_layout


def run(cmd: list[str]) -> int:
    print("$", " ".join(cmd))
    return subprocess.run(cmd, check=False, cwd=ROOT).returncode


def layout_smoke() -> bool:
    groups = [
        YearGroup(year=year, albums=[{"id": f"album-ecm-{year}-{n}"} for n in range(25)])
        for year in range(1990, 1970, -1)
    ]
    for width in (200, 768, 1280, 2560):
        layout = compute_grid_layout(groups, width)
        print(f"  {width}px -> {layout.cols} cols, {len(layout.cells)} cells, {layout.total_height:.0f}px tall")
        if len(layout.cells) != 20 * 26 or layout.cols % 2:
            return False
    return True


def main() -> int:
    code = run([sys.executable, "-m", "unittest", "discover", "-s", "tests", "-p", "test_*.py"])
    if code != 0:
        print("\n❌ dev_check failed (tests)")
        return code

    print("\nLayout smoke:")
    if not layout_smoke():
        print("\n❌ dev_check failed (layout smoke)")
        return 1

    print("\n✅ dev_check passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
