"""
Huffman text codec experiments

Runs repeated build / encode / pack / decode cycles over synthetic text and
records timings, sizes and round-trip correctness. Also holds the per-symbol
code report used by `huffman-tool report`.

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 256 --generators english_like,zipf64
  python experiments.py --outdir results --no_exp2
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import string
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
from bitstream import pack_bits, unpack_bits
from container import compress_text
from frequency import count_frequencies


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


# Synthetic text generators

PRINTABLE = string.ascii_letters + string.digits + string.punctuation + " \n"

def _sample(symbols: str, weights: List[float], size: int, seed: int) -> str:
    rng = random.Random(seed)
    return "".join(rng.choices(symbols, weights=weights, k=size))

def gen_uniform(size: int, alphabet: int = len(PRINTABLE), seed: int = 0) -> str:
    symbols = PRINTABLE[:alphabet]
    return _sample(symbols, [1.0] * len(symbols), size, seed)

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    others = PRINTABLE.replace(dominant, "")
    weights = [dom_frac] + [(1.0 - dom_frac) / len(others)] * len(others)
    return _sample(dominant + others, weights, size, seed)

def gen_zipf_like(size: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> str:
    symbols = PRINTABLE[:alphabet]
    weights = [1.0 / ((i + 1) ** s) for i in range(len(symbols))]
    return _sample(symbols, weights, size, seed)

def gen_english_like(size: int, seed: int = 0) -> str:
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == " ":
            weights.append(13.0)
        elif ch == "\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(chars, weights, size, seed)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform": lambda size, seed: gen_uniform(size, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_chars: int, seed: int) -> Tuple[str, str]:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, expected one of {', '.join(sorted(GENERATOR_REGISTRY))}")
    return name, fn(size_chars, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    text_chars: int
    run_id: int
    unique_symbols: int
    tree_height: int

    build_ms: float
    encode_ms: float
    pack_ms: float
    decode_ms: float
    total_ms: float

    payload_bytes: int
    container_bytes: int
    pad_bits: int
    avg_code_bits: float
    compression_ratio: float  # container bytes / utf-8 bytes

    correctness_ok: int  # 1 or 0


def run_one(text: str) -> MetricRow:
    ft = dict(count_frequencies(text))

    t0 = now_ns()
    codec = huff.HuffmanCodec.from_weights(ft)
    t1 = now_ns()

    bits = codec.encode(text)
    t2 = now_ns()

    packed, pad_bits = pack_bits(bits)
    t3 = now_ns()

    decoded = codec.decode_text(unpack_bits(packed, pad_bits), len(text))
    t4 = now_ns()

    container_bytes = len(compress_text(text))
    raw_bytes = len(text.encode("utf-8"))

    build_ms = ns_to_ms(t1 - t0)
    encode_ms = ns_to_ms(t2 - t1)
    pack_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t4 - t3)

    return MetricRow(
        exp_name="",
        dataset_name="",
        text_chars=len(text),
        run_id=0,
        unique_symbols=len(ft),
        tree_height=huff.tree_height(codec.root),
        build_ms=build_ms,
        encode_ms=encode_ms,
        pack_ms=pack_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + pack_ms + decode_ms,
        payload_bytes=len(packed),
        container_bytes=container_bytes,
        pad_bits=pad_bits,
        avg_code_bits=huff.average_code_length(codec.codes, ft),
        compression_ratio=container_bytes / max(1, raw_bytes),
        correctness_ok=1 if decoded == text else 0,
    )


def write_csv(path: Path, rows: List) -> None:
    if not rows:
        return
    names = [f.name for f in fields(rows[0])]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("compression_ratio", "avg_code_bits", "build_ms", "encode_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, text_chars and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.text_chars), []).append(r)

    summary_fields = ["exp_name", "dataset_name", "text_chars", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size), items in sorted(key_to.items()):
            row = {"exp_name": exp_name, "dataset_name": dataset_name, "text_chars": size, "n_runs": len(items)}
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            row["correctness_ok_rate"] = sum(x.correctness_ok for x in items) / len(items)
            w.writerow(row)


# Plotting

def plot_distribution(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    for field, ylabel, name in (
        ("compression_ratio", "Container Bytes / UTF-8 Bytes", "exp1_compression_ratio.png"),
        ("avg_code_bits", "Average Code Length (bits/char)", "exp1_avg_code_bits.png"),
    ):
        plt.figure()
        plt.bar(x, [mean_for(d, field) for d in datasets])
        plt.xticks(x, datasets, rotation=20, ha="right")
        plt.ylabel(ylabel)
        plt.title(f"Experiment 1: {ylabel} by Distribution")
        plt.tight_layout()
        plt.savefig(outdir / name, dpi=200)
        plt.close()


def plot_size_scaling(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.text_chars for r in dist_rows))

        plt.figure()
        for field, label in (("encode_ms", "encode"), ("decode_ms", "decode"), ("build_ms", "build")):
            y = [statistics.mean(getattr(r, field) for r in dist_rows if r.text_chars == s) for s in sizes]
            plt.plot(sizes, y, marker="o", label=label)
        plt.xlabel("Text Size (chars)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()


# Per-symbol code report

@dataclass
class CodeRow:
    symbol: str
    code_point: int
    weight: int
    code: str
    code_length: int
    self_information: float  # -log2(p), the ideal code length


def code_rows(codes: Mapping[str, str], ft: Mapping[str, int]) -> List[CodeRow]:
    total = sum(ft.values())
    rows = []
    for symbol, code in codes.items():
        w = ft[symbol]
        info = -math.log2(w / total) if w and total else float("inf")
        rows.append(CodeRow(symbol, ord(symbol), w, code, len(code), info))
    rows.sort(key=lambda r: (r.code_length, r.symbol))
    return rows


def write_code_report(path: Path, rows: List[CodeRow]) -> None:
    write_csv(path, rows)


def plot_code_lengths(rows: List[CodeRow], path: Path) -> None:
    x = list(range(len(rows)))
    labels = [repr(r.symbol)[1:-1] for r in rows]

    plt.figure(figsize=(max(6.0, 0.25 * len(rows)), 4.5))
    plt.bar(x, [r.code_length for r in rows], label="Huffman code length")
    finite = [(i, r.self_information) for i, r in zip(x, rows) if math.isfinite(r.self_information)]
    if finite:
        plt.plot([i for i, _ in finite], [v for _, v in finite], "r.", label="-log2(p)")
    plt.xticks(x, labels, rotation=90, fontsize=6)
    plt.ylabel("Bits")
    plt.title("Code Length per Symbol")
    plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()


# Main

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman text codec experiments")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    ap.add_argument("--size_kb", type=int, default=64, help="Experiment 1 text size in K characters")
    ap.add_argument("--generators", type=str, default="uniform,zipf64,repetitive90,english_like",
                    help="Comma-separated generator names for experiment 1")

    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in K characters (doubling)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max size in K characters")
    ap.add_argument("--exp2_generators", type=str, default="english_like,uniform",
                    help="Comma-separated generator names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    try:
        if not args.no_exp1:
            size = max(1, args.size_kb) * 1024
            for gen_name in parse_csv_list(args.generators):
                for run_id in range(1, args.runs + 1):
                    dataset_name, text = generate_dataset(gen_name, size, args.seed + run_id)
                    row = run_one(text)
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

        if not args.no_exp2:
            sizes: List[int] = []
            s = max(1, args.exp2_min_kb) * 1024
            while s <= max(1, args.exp2_max_kb) * 1024:
                sizes.append(s)
                s *= 2

            for gen_name in parse_csv_list(args.exp2_generators):
                for size in sizes:
                    for run_id in range(1, args.runs + 1):
                        dataset_name, text = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id)
                        row = run_one(text)
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = dataset_name
                        row.run_id = run_id
                        rows.append(row)
    except ValueError as e:
        ap.error(str(e))

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_distribution(rows, outdir)
    plot_size_scaling(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
