from __future__ import annotations

import os
from typing import BinaryIO, Union

from bitarray import bitarray
from bitarray.util import ba2int, int2ba

Path = Union[str, os.PathLike]
Source = Union[Path, bytes, BinaryIO]


class BitInputStream: # reads a byte source N bits at a time, most significant bit first
    def __init__(self, source: Source):
        if isinstance(source, bytes):
            data = source
        elif isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as f:
                data = f.read()
        else:
            data = source.read()

        self._bits = bitarray(endian="big")
        self._bits.frombytes(data)
        self._pos = 0
        self.bits_read = 0 # total consumed, survives reset()

    def read_bits(self, n: int) -> int:
        """
        Returns the next n bits as an unsigned int, or -1 when fewer than n bits remain
        """
        if n < 1:
            raise ValueError(f"bit count must be positive, got {n}")
        end = self._pos + n
        if end > len(self._bits):
            return -1
        value = ba2int(self._bits[self._pos:end])
        self._pos = end
        self.bits_read += n
        return value

    def reset(self) -> None:
        self._pos = 0

    def close(self) -> None:
        self._bits = bitarray(endian="big")
        self._pos = 0

    def __enter__(self) -> BitInputStream:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BitOutputStream: # buffers bits and writes them out as whole bytes
    def __init__(self, sink: Union[Path, BinaryIO]):
        self._owned = isinstance(sink, (str, os.PathLike))
        self._sink = open(sink, "wb") if self._owned else sink
        self._bits = bitarray(endian="big")
        self._closed = False
        self.bits_written = 0

    def write_bits(self, n: int, value: int) -> None:
        if n < 1: # no upper bound, codes can be up to 256 bits long
            raise ValueError(f"bit count must be positive, got {n}")
        if self._closed:
            raise ValueError("write to closed BitOutputStream")
        self._bits.extend(int2ba(value & ((1 << n) - 1), length=n, endian="big"))
        self.bits_written += n

    def flush(self) -> None:
        whole = len(self._bits) - len(self._bits) % 8
        if whole:
            self._sink.write(self._bits[:whole].tobytes())
            del self._bits[:whole]
        self._sink.flush()

    def close(self) -> None:
        """
        Pads the trailing partial byte with zeros and writes everything out
        """
        if self._closed:
            return
        self.flush()
        if len(self._bits):
            self._sink.write(self._bits.tobytes()) # tobytes() zero-fills the last byte
            self._bits.clear()
        self._sink.flush()
        if self._owned:
            self._sink.close()
        self._closed = True

    def __enter__(self) -> BitOutputStream:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
