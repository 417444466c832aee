"""
Command-line driver: compress a file to <stem>.huff, decompress to <stem>.unhuff

Default names replace only the last suffix (notes.tar.gz -> notes.tar.huff).
An output that would land on one of the inputs is refused.

How to run:
  python huff.py compress notes.txt
  python huff.py compress notes.txt --eof          (also writes notes.code)
  python huff.py decompress notes.huff
  python huff.py decompress notes.huff --code notes.code
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from errors import HuffmanError
from stream_codec import compress, compress_stats, compress_with_eof, decompress, decompress_with_eof


def _refuse_overwrite(inputs: List[Path], outputs: List[Path]) -> None:
    """
    Raises FileExistsError when an output would replace an input or another output
    """
    taken = {p.resolve(): p for p in inputs}
    for out in outputs:
        key = out.resolve()
        if key in taken:
            raise FileExistsError(f"refusing to overwrite {taken[key]} with output {out}")
        taken[key] = out


def compress_file(src: Path, dst: Optional[Path] = None, eof: bool = False) -> List[Path]:
    dst = dst or src.with_suffix(".huff")
    outputs = [dst, dst.with_suffix(".code")] if eof else [dst]
    _refuse_overwrite([src], outputs)
    data = src.read_bytes()
    if eof:
        description, payload = compress_with_eof(data)
        outputs[1].write_text(description, encoding="ascii")
        dst.write_bytes(payload)
        return outputs
    dst.write_bytes(compress(data))
    return outputs


def decompress_file(src: Path, dst: Optional[Path] = None, code: Optional[Path] = None) -> Path:
    dst = dst or src.with_suffix(".unhuff")
    _refuse_overwrite([src] if code is None else [src, code], [dst])
    blob = src.read_bytes()
    if code is not None:
        # raw bytes, the codec rejects anything that is not ASCII
        data = decompress_with_eof(code.read_bytes(), blob)
    else:
        data = decompress(blob)
    # only written once decoding succeeded
    dst.write_bytes(data)
    return dst


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huff", description="Huffman file compressor")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compress", help="Compress a file")
    c.add_argument("input", type=Path, help="File to compress")
    c.add_argument("-o", "--output", type=Path, default=None, help="Output path (default <stem>.huff)")
    c.add_argument("--eof", action="store_true", help="Use a pseudo-EOF symbol and a separate .code description")
    c.add_argument("--stats", action="store_true", help="Print compression statistics")

    d = sub.add_parser("decompress", help="Decompress a .huff file")
    d.add_argument("input", type=Path, help="File to decompress")
    d.add_argument("-o", "--output", type=Path, default=None, help="Output path (default <stem>.unhuff)")
    d.add_argument("--code", type=Path, default=None, help="Code description written by 'compress --eof'")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "compress":
            written = compress_file(args.input, args.output, eof=args.eof)
            for p in written:
                print(f"Wrote {p}")
            if args.stats:
                st = compress_stats(args.input.read_bytes(), "pseudo_eof" if args.eof else "preamble")
                print(f"{st.original_bytes} -> {st.compressed_bytes} bytes "
                      f"(ratio {st.compression_ratio:.3f}, {st.unique_symbols} symbols, "
                      f"{st.avg_code_length:.3f} bits/symbol)")
        else:
            print(f"Wrote {decompress_file(args.input, args.output, code=args.code)}")
    except (HuffmanError, OSError) as e:
        print(f"huff: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
