"""Time DupIndexer insertion over repeated-value workloads."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Callable, Mapping

PROJECT_ROOT = Path(__file__).resolve().parent.parent
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

import numpy as np
from loguru import logger

from dup_indexer import DupIndexer
from dup_indexer.utils import apply_overrides, get_by_dotted_path, load_config


Workload = Callable[[int, int, Mapping[str, Any]], DupIndexer]


def _bench_int(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for value in range(size):
            indexer.insert(value)
    return indexer


def _bench_int_copy(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for value in range(size):
            indexer.insert_copy(value)
    return indexer


def _bench_str(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for value in range(size):
            indexer.insert(str(value))
    return indexer


def _bench_bytes_ref(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    blob = b"".join(value.to_bytes(4, "little") for value in range(size))
    buffer = memoryview(blob)
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for offset in range(0, len(buffer), 4):
            indexer.insert_ref(buffer[offset : offset + 4])
    return indexer


def _random_rows(size: int, cfg: Mapping[str, Any]) -> np.ndarray:
    rng = np.random.default_rng(get_by_dotted_path(cfg, "seed", 0))
    length = int(get_by_dotted_path(cfg, "array.length", 16))
    return rng.integers(0, 2**31, size=(size, length), dtype=np.int64)


def _bench_array(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    rows = _random_rows(size, cfg)
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for row in rows:
            indexer.insert(row.copy())
    return indexer


def _bench_array_ref(size: int, repeats: int, cfg: Mapping[str, Any]) -> DupIndexer:
    rows = _random_rows(size, cfg)
    indexer = DupIndexer.new()
    for _ in range(repeats):
        for row in rows:
            indexer.insert_ref(row)
    return indexer


WORKLOADS: dict[str, Workload] = {
    "int": _bench_int,
    "int_copy": _bench_int_copy,
    "str": _bench_str,
    "bytes_ref": _bench_bytes_ref,
    "array": _bench_array,
    "array_ref": _bench_array_ref,
}


def run_benchmarks(config: Mapping[str, Any]) -> dict[tuple[str, int], float]:
    """Run every configured workload and return elapsed seconds per (name, size)."""
    bench_cfg = config.get("bench", {})
    repeats = int(bench_cfg.get("repeats", 100))
    sizes = [int(size) for size in bench_cfg.get("sizes", [100])]
    names = bench_cfg.get("workloads", list(WORKLOADS))

    results: dict[tuple[str, int], float] = {}
    for name in names:
        workload = WORKLOADS.get(name)
        if workload is None:
            raise ValueError(f"Unsupported workload '{name}'. Choose from {sorted(WORKLOADS)}.")
        for size in sizes:
            start = time.perf_counter()
            indexer = workload(size, repeats, bench_cfg)
            elapsed = time.perf_counter() - start
            distinct = len(indexer.into_list())
            results[(name, size)] = elapsed
            logger.info(
                "{:<10} | size={:>6} repeats={:>4} distinct={:>6} | {:.4f}s ({:.1f} ns/insert)",
                name,
                size,
                repeats,
                distinct,
                elapsed,
                elapsed * 1e9 / max(size * repeats, 1),
            )
    return results


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/bench.yaml"),
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config entry, e.g. --set bench.repeats=10.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = apply_overrides(load_config(args.config), args.overrides)

    logger.remove()
    logger.add(sys.stderr, level=get_by_dotted_path(config, "logging.level", "INFO"))
    logger.enable("dup_indexer")

    logger.info("Running benchmarks with config at {}", args.config)
    run_benchmarks(config)


if __name__ == "__main__":
    main()
