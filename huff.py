"""
Command line front end for the Huffman tree-header format

How to run:
  python huff.py compress input.txt input.hf
  python huff.py decompress input.hf input.txt --debug 1
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import List, Optional

from bitio import BitInputStream, BitOutputStream
from huffman import HuffException, HuffProcessor


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman compress/decompress a file")
    ap.add_argument("mode", choices=("compress", "decompress"))
    ap.add_argument("input", type=str, help="File to read")
    ap.add_argument("output", type=str, help="File to write")
    ap.add_argument("--debug", type=int, default=0, help="Debug level (1 = bit counts, 4 = tree and codes)")
    args = ap.parse_args(argv)

    processor = HuffProcessor(args.debug)
    t0 = time.perf_counter()
    try:
        with BitInputStream(args.input) as bit_in, BitOutputStream(args.output) as bit_out:
            if args.mode == "compress":
                processor.compress(bit_in, bit_out)
            else:
                processor.decompress(bit_in, bit_out)
    except (HuffException, OSError) as e:
        print(f"{args.mode} failed: {e}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - t0

    read_bytes = os.path.getsize(args.input)
    written_bytes = (bit_out.bits_written + 7) // 8
    print(f"{args.mode}: {args.input} -> {args.output}")
    print(f"{read_bytes} bytes read, {written_bytes} bytes written in {elapsed * 1000:.2f} ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
