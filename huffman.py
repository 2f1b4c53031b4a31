import heapq
import io
import itertools
import sys
from typing import Dict, List

from bitio import BitInputStream, BitOutputStream

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE # end-of-stream symbol, one past the last byte value
HEADER_SYMBOL_BITS = 9 # PSEUDO_EOF needs one bit more than a byte
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1 # magic for the tree-header format

DEBUG_LOW = 1
DEBUG_HIGH = 4


class HuffException(Exception): # malformed compressed input
    pass


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, weight, left=None, right=None):
        self.symbol = symbol    # 0..256 or None for internal nodes
        self.weight = weight
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.weight})"
        return f"HuffmanNode(None, {self.weight}, {self.left!r}, {self.right!r})"


def count_frequencies(data: bytes) -> List[int]:
    counts = [0] * (ALPH_SIZE + 1)
    for b in data:
        counts[b] += 1
    counts[PSEUDO_EOF] = 1
    return counts


def read_for_counts(bit_in: BitInputStream) -> List[int]:
    """
    Tallies every 8-bit word left in the stream, then rewinds it to the start
    """
    counts = [0] * (ALPH_SIZE + 1)
    word = bit_in.read_bits(BITS_PER_WORD)
    while word != -1:
        counts[word] += 1
        word = bit_in.read_bits(BITS_PER_WORD)
    bit_in.reset()
    counts[PSEUDO_EOF] = 1
    return counts


def build_huffman_tree(counts: List[int], debug: int = 0) -> HuffmanNode:
    """
    Merges the two lightest nodes until one is left. Equal weights leave the
    heap in the order they entered it, so output is reproducible.
    """
    arrival = itertools.count()
    pq = [(count, next(arrival), HuffmanNode(symbol, count))
          for symbol, count in enumerate(counts) if count > 0]
    if not pq:
        raise ValueError("cannot build a Huffman tree with no symbols")
    heapq.heapify(pq)

    if debug >= DEBUG_HIGH:
        print(f"pq created with {len(pq)} nodes", file=sys.stderr)

    while len(pq) > 1:
        _, _, left = heapq.heappop(pq)
        _, _, right = heapq.heappop(pq)
        merged = HuffmanNode(None, left.weight + right.weight, left, right)
        heapq.heappush(pq, (merged.weight, next(arrival), merged))

    root = pq[0][2]
    if root.is_leaf():
        # one symbol: give it a parent so its code is "0" rather than empty
        twin = HuffmanNode(root.symbol, root.weight)
        root = HuffmanNode(None, root.weight, root, twin)
    return root


def generate_huffman_codes(root: HuffmanNode, debug: int = 0) -> Dict[int, str]:
    codes: Dict[int, str] = {}

    def walk(node, path):
        if node.is_leaf():
            codes.setdefault(node.symbol, path or "0")
            if debug >= DEBUG_HIGH:
                print(f"encoding for {node.symbol} is {codes[node.symbol]}", file=sys.stderr)
            return
        walk(node.left, path + "0")
        walk(node.right, path + "1")

    walk(root, "")
    return codes


def write_header(root: HuffmanNode, bit_out: BitOutputStream) -> None: # pre-order: 0 = internal, 1 + 9 bits = leaf
    if root.is_leaf():
        bit_out.write_bits(1, 1)
        bit_out.write_bits(HEADER_SYMBOL_BITS, root.symbol)
        return
    bit_out.write_bits(1, 0)
    write_header(root.left, bit_out)
    write_header(root.right, bit_out)


def read_header(bit_in: BitInputStream, depth: int = 0) -> HuffmanNode:
    bit = bit_in.read_bits(1)
    if bit == -1:
        raise HuffException("out of bits in reading tree header")
    if bit == 0:
        if depth >= PSEUDO_EOF: # a full tree over 257 leaves is never deeper than 256
            raise HuffException("tree header nested too deep")
        left = read_header(bit_in, depth + 1)
        right = read_header(bit_in, depth + 1)
        return HuffmanNode(None, 0, left, right)

    value = bit_in.read_bits(HEADER_SYMBOL_BITS)
    if value == -1:
        raise HuffException("out of bits in reading tree header")
    return HuffmanNode(value, 0)


def write_compressed_bits(codes: Dict[int, str], bit_in: BitInputStream, bit_out: BitOutputStream) -> None:
    word = bit_in.read_bits(BITS_PER_WORD)
    while word != -1:
        code = codes[word]
        bit_out.write_bits(len(code), int(code, 2))
        word = bit_in.read_bits(BITS_PER_WORD)
    code = codes[PSEUDO_EOF]
    bit_out.write_bits(len(code), int(code, 2))


def read_compressed_bits(root: HuffmanNode, bit_in: BitInputStream, bit_out: BitOutputStream) -> None:
    node = root
    while True:
        bit = bit_in.read_bits(1)
        if bit == -1:
            raise HuffException("bad input, no PSEUDO_EOF")
        node = node.right if bit == 1 else node.left

        # Leaf
        if node.is_leaf():
            if node.symbol == PSEUDO_EOF:
                return
            if node.symbol > PSEUDO_EOF:
                raise HuffException(f"bad input, symbol {node.symbol} out of range")
            bit_out.write_bits(BITS_PER_WORD, node.symbol)
            node = root


class HuffProcessor:
    def __init__(self, debug: int = 0):
        self.debug = debug

    def compress(self, bit_in: BitInputStream, bit_out: BitOutputStream) -> int:
        """
        Writes magic, tree header and body for everything bit_in holds.
        Returns the number of bits written before padding.
        """
        counts = read_for_counts(bit_in)
        root = build_huffman_tree(counts, self.debug)
        codes = generate_huffman_codes(root, self.debug)

        bit_out.write_bits(BITS_PER_INT, HUFF_TREE)
        write_header(root, bit_out)
        header_bits = bit_out.bits_written

        bit_in.reset()
        write_compressed_bits(codes, bit_in, bit_out)
        bit_out.close()

        if self.debug >= DEBUG_LOW:
            print(f"compress: read {bit_in.bits_read} bits, wrote {bit_out.bits_written} (header {header_bits})",
                  file=sys.stderr)
        return bit_out.bits_written

    def decompress(self, bit_in: BitInputStream, bit_out: BitOutputStream) -> int:
        magic = bit_in.read_bits(BITS_PER_INT)
        if magic != HUFF_TREE:
            raise HuffException(f"illegal header starts with {magic:#x}" if magic != -1
                                else "illegal header, input shorter than magic number")
        root = read_header(bit_in)
        if root.is_leaf():
            raise HuffException("tree header is a single leaf, no code to decode with")
        read_compressed_bits(root, bit_in, bit_out)
        bit_out.close()

        if self.debug >= DEBUG_LOW:
            print(f"decompress: read {bit_in.bits_read} bits, wrote {bit_out.bits_written}", file=sys.stderr)
        return bit_out.bits_written

    def compress_bytes(self, data: bytes) -> bytes:
        sink = io.BytesIO()
        self.compress(BitInputStream(data), BitOutputStream(sink))
        return sink.getvalue()

    def decompress_bytes(self, data: bytes) -> bytes:
        sink = io.BytesIO()
        self.decompress(BitInputStream(data), BitOutputStream(sink))
        return sink.getvalue()
