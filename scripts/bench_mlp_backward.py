"""
scripts/bench_mlp_backward.py

Forward + backward microbenchmark (NOT a unit test) for fixgrad.

Builds a small multilayer perceptron out of differentiable operations
(`matrix_product`, `add_bias`, `sigmoid`, optional `dropout`) and times one
full step: graph construction, forward evaluation, and the backward pass
from a scalar loss.

Timing policy
-------------
- Parameters and inputs are allocated once per case, outside the timed region.
- Gradients are zeroed inside the timed step, as a training loop would.
- Reports the median over `--repeats` runs after `--warmup` untimed runs.

Usage
-----
python scripts/bench_mlp_backward.py --presets
python scripts/bench_mlp_backward.py --batch 64 --width 256 --depth 4 --dtype float32
python scripts/bench_mlp_backward.py --batch 32 --width 128 --depth 8 --dropout 0.2
"""

from __future__ import annotations

import argparse
import os
import statistics
import sys
import time
from dataclasses import dataclass
from typing import Callable

import numpy as np

# -------------------------
# Make repo_root/src importable
# -------------------------
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from fixgrad import Tensor, Variable, functional as F


def _time_one(fn: Callable[[], None], *, warmup: int, repeats: int) -> list[float]:
    for _ in range(warmup):
        fn()
    ts: list[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        ts.append(t1 - t0)
    return ts


def _fmt_seconds(x: float) -> str:
    if x < 1e-3:
        return f"{x*1e6:.2f} us"
    if x < 1:
        return f"{x*1e3:.2f} ms"
    return f"{x:.3f} s"


@dataclass(frozen=True)
class Case:
    name: str
    batch: int
    width: int
    depth: int


PRESETS = (
    Case("tiny", batch=8, width=16, depth=2),
    Case("small", batch=32, width=64, depth=4),
    Case("medium", batch=64, width=256, depth=4),
    Case("deep", batch=16, width=64, depth=16),
)


def _build_params(case: Case, *, dtype: np.dtype, rng: np.random.Generator):
    params = []
    scale = 1.0 / np.sqrt(case.width)
    for _ in range(case.depth):
        w = Variable(
            Tensor.from_numpy(
                rng.uniform(-scale, scale, size=(case.width, case.width)).astype(dtype)
            ),
            requires_grad=True,
        )
        b = Variable(Tensor.zeros((case.width,), dtype=dtype), requires_grad=True)
        params.append((w, b))
    return params


def _bench_case(
    case: Case,
    *,
    dtype: np.dtype,
    dropout: float,
    warmup: int,
    repeats: int,
    rng_seed: int,
) -> None:
    rng = np.random.default_rng(rng_seed)
    params = _build_params(case, dtype=dtype, rng=rng)
    x = Tensor.from_numpy(
        rng.standard_normal((case.batch, case.width)).astype(dtype)
    )

    def step() -> None:
        for w, b in params:
            w.zero_grad()
            b.zero_grad()
        h = x
        for w, b in params:
            h = F.sigmoid(F.add_bias(h @ w, b))
            if dropout > 0:
                h = F.dropout(h, dropout, generator=rng)
        h.sum().backward()

    ts = _time_one(step, warmup=warmup, repeats=repeats)
    med = statistics.median(ts)
    nodes = case.depth * (4 if dropout > 0 else 3) + 1
    print(
        f"{case.name:>8s}  batch={case.batch:<5d} width={case.width:<5d} "
        f"depth={case.depth:<3d} nodes={nodes:<4d} step={_fmt_seconds(med)}"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="fixgrad MLP forward+backward benchmark")
    parser.add_argument("--presets", action="store_true", help="Run the preset cases.")
    parser.add_argument("--batch", type=int, default=32)
    parser.add_argument("--width", type=int, default=64)
    parser.add_argument("--depth", type=int, default=4)
    parser.add_argument("--dtype", choices=("float32", "float64"), default="float32")
    parser.add_argument("--dropout", type=float, default=0.0)
    parser.add_argument("--warmup", type=int, default=3)
    parser.add_argument("--repeats", type=int, default=10)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    dtype = np.dtype(args.dtype)
    cases = (
        PRESETS
        if args.presets
        else (Case("custom", batch=args.batch, width=args.width, depth=args.depth),)
    )

    print(f"dtype={dtype} dropout={args.dropout} warmup={args.warmup} repeats={args.repeats}")
    for case in cases:
        _bench_case(
            case,
            dtype=dtype,
            dropout=args.dropout,
            warmup=args.warmup,
            repeats=args.repeats,
            rng_seed=args.seed,
        )


if __name__ == "__main__":
    main()
