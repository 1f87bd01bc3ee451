"""
huffman-tool: character-level Huffman coding of text files

  huffman-tool freq notes.txt --symbol t --symbol X
  huffman-tool codes notes.txt
  huffman-tool compress notes.txt notes.huf
  huffman-tool decompress notes.huf notes.out.txt
  huffman-tool report notes.txt --outdir report
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import container
import huffman as huff
from frequency import count_frequencies_parallel, read_text


def _say(args, *parts) -> None:
    if not args.quiet:
        print(*parts)


def cmd_freq(args) -> int:
    ft = count_frequencies_parallel(read_text(args.file, args.encoding), args.workers)
    if args.symbol:
        for symbol in args.symbol:
            print(f"{symbol!r} frequency: {ft.get(symbol, 0)}")
        return 0

    for symbol, count in sorted(ft.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"{symbol!r}\t{count}")
    _say(args, f"{len(ft)} distinct symbols, {sum(ft.values())} total")
    return 0


def cmd_codes(args) -> int:
    ft = count_frequencies_parallel(read_text(args.file, args.encoding), args.workers)
    codec = huff.HuffmanCodec.from_weights(ft)
    for symbol, code in sorted(codec.codes.items(), key=lambda kv: (len(kv[1]), kv[0])):
        print(f"{symbol!r}\t{ft[symbol]}\t{code}")
    _say(args, f"weighted path length: {huff.weighted_path_length(codec.codes, ft)} bits")
    _say(args, f"average code length: {huff.average_code_length(codec.codes, ft):.4f} bits/symbol")
    return 0


def cmd_compress(args) -> int:
    text = read_text(args.src, args.encoding)
    blob = container.compress_text(text)
    container.write_file(args.dst, blob)
    _say(args, f"Wrote {len(blob)} bytes to {args.dst} ({len(text)} symbols)")
    return 0


def cmd_decompress(args) -> int:
    text = container.decompress_text(container.read_file(args.src))
    Path(args.dst).write_bytes(text.encode(args.encoding))
    _say(args, f"Wrote {len(text)} symbols to {args.dst}")
    return 0


def cmd_report(args) -> int:
    # matplotlib is only needed here
    import experiments

    ft = count_frequencies_parallel(read_text(args.file, args.encoding), args.workers)
    codec = huff.HuffmanCodec.from_weights(ft)
    rows = experiments.code_rows(codec.codes, ft)

    outdir = Path(args.outdir)
    experiments.safe_mkdir(outdir)
    experiments.write_code_report(outdir / "codes.csv", rows)
    experiments.plot_code_lengths(rows, outdir / "code_lengths.png")
    _say(args, f"Wrote {len(rows)} code rows to {outdir / 'codes.csv'}")
    _say(args, "Chart saved in:", (outdir / "code_lengths.png").resolve())
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman-tool", description="Static Huffman coding for text files")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Text encoding of input/output files")
    ap.add_argument("--quiet", action="store_true", help="Only print requested data, no summaries")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("freq", help="Print character frequencies")
    p.add_argument("file")
    p.add_argument("--symbol", action="append", help="Only report this character (repeatable)")
    p.add_argument("--workers", type=int, default=1, help="Processes used for counting")
    p.set_defaults(func=cmd_freq)

    p = sub.add_parser("codes", help="Print the Huffman code table")
    p.add_argument("file")
    p.add_argument("--workers", type=int, default=1, help="Processes used for counting")
    p.set_defaults(func=cmd_codes)

    p = sub.add_parser("compress", help="Compress a text file")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Decompress a file written by compress")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("report", help="Write a CSV and chart of the code table")
    p.add_argument("file")
    p.add_argument("--outdir", type=str, default="report", help="Output directory for CSV and chart")
    p.add_argument("--workers", type=int, default=1, help="Processes used for counting")
    p.set_defaults(func=cmd_report)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (huff.HuffmanError, OSError, UnicodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
