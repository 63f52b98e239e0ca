from __future__ import annotations

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from statistics import mean, pstdev

SHAPES = {
    "tiny": [2, 3, 1],
    "small": [8, 16, 4],
    "deep": [16, 32, 32, 8],
}


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.4f} ± {sd:.4f}"


def _time_ms(fn) -> float:
    start = time.perf_counter()
    fn()
    return (time.perf_counter() - start) * 1000.0


def _bench_one(shape, seed: int, batch: int, repeats: int):
    import numpy as np

    from nudgenet import Network, TrainingBatch

    rng = np.random.default_rng(seed)
    network = Network(shape)
    network.randomize(seed=seed, scale=0.5)
    data = TrainingBatch.from_arrays(
        rng.uniform(0.0, 1.0, size=(batch, shape[0])),
        rng.uniform(0.0, 1.0, size=(batch, shape[-1])),
    )
    inputs = data[0].inputs

    def cold():
        network.set_inputs(inputs)
        network.invalidate()
        network.get_outputs()

    cold_ms = mean(_time_ms(cold) for _ in range(repeats))
    warm_ms = mean(_time_ms(network.get_outputs) for _ in range(repeats))
    train_ms = mean(_time_ms(lambda: network.train_on_batch(data)) for _ in range(repeats))
    return {"cold_eval_ms": cold_ms, "warm_eval_ms": warm_ms, "train_batch_ms": train_ms}


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--batch", type=int, default=16)
    ap.add_argument("--repeats", type=int, default=5)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for name, shape in SHAPES.items():
        for s in args.seeds:
            r = _bench_one(shape, seed=s, batch=args.batch, repeats=args.repeats)
            runs.append({"shape": name, "seed": s, **r})
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    columns = ["cold_eval_ms", "warm_eval_ms", "train_batch_ms"]
    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["shape", "layers", "seeds", *[f"{c}_mu" for c in columns]])
        for name, shape in SHAPES.items():
            rows = [r for r in runs if r["shape"] == name]
            w.writerow(
                [name, "-".join(str(n) for n in shape), len(rows)]
                + [f"{mean(r[c] for r in rows):.4f}" for c in columns]
            )

    md_path = out / "bench_micro.md"
    lines = []
    lines.append("### Micro-Benchmark: memoized evaluation and batch training")
    lines.append("")
    lines.append(
        f"- Seeds: `{args.seeds}`; Batch: `{args.batch}`; Repeats: `{args.repeats}`"
    )
    lines.append("")
    lines.append("| Shape | Cold eval ms (μ±σ) | Warm eval ms (μ±σ) | Train batch ms (μ±σ) | Seeds |")
    lines.append("|---|---:|---:|---:|---:|")
    for name in SHAPES:
        rows = [r for r in runs if r["shape"] == name]
        cells = " | ".join(_fmt_mu_sigma([r[c] for r in rows]) for c in columns)
        lines.append(f"| {name.upper()} | {cells} | {len(rows)} |")
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
