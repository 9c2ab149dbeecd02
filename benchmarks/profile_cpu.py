"""CPU profiler entrypoint for TLVUTIL.

Runs a dump/undump round trip workload and writes a pstats file.

Run (PowerShell):

    python benchmarks\profile_cpu.py
    python -c "import pstats; p=pstats.Stats('benchmarks/profile.pstats'); p.sort_stats('cumtime').print_stats(30)"
"""

from __future__ import annotations

import cProfile
import os
import sys

# Allow running this file directly without installing the package.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from PYTLVUTIL.COM import create_entry, create_nested_entry
from PYTLVUTIL.DUMP import dump
from PYTLVUTIL.TREE import undump


def workload(iterations: int = 2000) -> None:
    leaf = create_entry(0x02, b"hello")
    payload = b"".join(create_nested_entry(0x01, leaf, create_entry(0x300, b"\xff" * 300)) for _ in range(10))

    for _ in range(iterations):
        text = dump(payload)
        undump(text.encode("ascii"))


def main() -> None:
    cProfile.run("workload()", filename="benchmarks/profile.pstats")


if __name__ == "__main__":
    main()
