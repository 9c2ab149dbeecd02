"""Micro-benchmarks for TLVUTIL codec primitives.

This script measures CPU time for:
- header packing
- nested TLV decoding
- dump (binary -> text)
- undump (text -> binary)
- memory peak during dump

Run (PowerShell):

    python benchmarks\bench_protocol.py
"""

from __future__ import annotations

import os
import sys
import time
import tracemalloc

# Allow running this file directly without installing the package.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from PYTLVUTIL.COM import create_entry, create_nested_entry, pack_header
from PYTLVUTIL.DUMP import dump
from PYTLVUTIL.RE import mem_read_all
from PYTLVUTIL.TREE import undump


def _now() -> float:
    return time.perf_counter()


def _sample() -> bytes:
    leaf = create_entry(0x02, b"hello")
    inner = create_nested_entry(0x123, *(leaf for _ in range(10)))
    return b"".join(create_nested_entry(0x01, inner, leaf) for _ in range(10))


def bench_pack_header(iterations: int = 200000) -> dict[str, float]:
    t0 = _now()
    s = 0
    for i in range(iterations):
        s ^= pack_header(i & 0x1FFF, i & 0xFFFF, is_forward=bool(i & 1))[0]
    t1 = _now()
    return {"pack_header_time_s": t1 - t0, "dummy": float(s)}


def bench_mem_read_all(iterations: int = 20000) -> dict[str, float]:
    payload = _sample()
    t0 = _now()
    cnt = 0
    for _ in range(iterations):
        cnt += len(mem_read_all(payload))
    t1 = _now()
    return {"mem_read_all_time_s": t1 - t0, "entries": float(cnt)}


def bench_dump(iterations: int = 2000) -> dict[str, float]:
    payload = _sample()
    t0 = _now()
    n = 0
    for _ in range(iterations):
        n += len(dump(payload))
    t1 = _now()
    return {"dump_time_s": t1 - t0, "chars": float(n)}


def bench_undump(iterations: int = 2000) -> dict[str, float]:
    text = dump(_sample()).encode("ascii")
    t0 = _now()
    n = 0
    for _ in range(iterations):
        n += len(undump(text))
    t1 = _now()
    return {"undump_time_s": t1 - t0, "bytes": float(n)}


def bench_memory() -> dict[str, float]:
    payload = _sample() * 10

    tracemalloc.start()
    t0 = _now()
    for _ in range(200):
        _ = dump(payload)
    t1 = _now()
    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    return {
        "mem_time_s": t1 - t0,
        "mem_current_kb": current / 1024.0,
        "mem_peak_kb": peak / 1024.0,
    }


def main() -> None:
    print("== TLVUTIL micro-benchmarks ==")
    print(bench_pack_header())
    print(bench_mem_read_all())
    print(bench_dump())
    print(bench_undump())
    print(bench_memory())


if __name__ == "__main__":
    main()
