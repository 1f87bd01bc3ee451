"""
Self-contained compressed text stream.

Layout (big-endian):
    [4B]  MAGIC "HUF1"
    [8B]  symbol count (uint64)
    [4B]  table size n (uint32)
    n x ( [4B] code point (uint32), [8B] weight (uint64) )
    [1B]  pad bits
    [..]  payload, MSB first

The weight table is stored rather than the tree: tree construction is
deterministic, so the decoder rebuilds exactly the encoder's tree.
"""

import struct
from pathlib import Path
from typing import Dict, Tuple, Union

from bitstream import pack_bits, unpack_bits
from frequency import count_frequencies
from huffman import CorruptStream, HuffmanCodec

MAGIC = b"HUF1"
_HEADER = struct.Struct(">4sQI")
_ENTRY = struct.Struct(">IQ")
_PAD = struct.Struct(">B")


def encode_header(count: int, table: Dict[str, int], pad_bits: int) -> bytes:
    out = bytearray(_HEADER.pack(MAGIC, count, len(table)))
    for symbol in sorted(table):
        out += _ENTRY.pack(ord(symbol), table[symbol])
    out += _PAD.pack(pad_bits)
    return bytes(out)


def decode_header(blob: bytes) -> Tuple[int, Dict[str, int], int, int]:
    """
    Returns (count, table, pad_bits, payload_offset)
    """
    if len(blob) < _HEADER.size:
        raise CorruptStream("stream too short for a header")
    magic, count, n = _HEADER.unpack_from(blob, 0)
    if magic != MAGIC:
        raise CorruptStream(f"bad magic {magic!r}")

    offset = _HEADER.size
    if offset + n * _ENTRY.size + _PAD.size > len(blob):
        raise CorruptStream(f"weight table of {n} entries does not fit in the stream")

    table: Dict[str, int] = {}
    for _ in range(n):
        code_point, weight = _ENTRY.unpack_from(blob, offset)
        offset += _ENTRY.size
        try:
            symbol = chr(code_point)
        except (ValueError, OverflowError):
            raise CorruptStream(f"invalid code point {code_point}") from None
        if symbol in table:
            raise CorruptStream(f"duplicate table entry for {symbol!r}")
        table[symbol] = weight

    (pad_bits,) = _PAD.unpack_from(blob, offset)
    offset += _PAD.size
    return count, table, pad_bits, offset


def compress_text(text: str) -> bytes:
    table = dict(count_frequencies(text))
    if not table:
        return encode_header(0, {}, 0)

    codec = HuffmanCodec.from_weights(table)
    payload, pad_bits = pack_bits(codec.encode(text))
    return encode_header(len(text), table, pad_bits) + payload


def decompress_text(blob: bytes) -> str:
    count, table, pad_bits, offset = decode_header(blob)
    bits = unpack_bits(blob[offset:], pad_bits)

    if not table:
        if count or bits:
            raise CorruptStream("payload present without a weight table")
        return ""

    codec = HuffmanCodec.from_weights(table)
    text = codec.decode_text(bits, count)

    used = sum(len(codec.codes[ch]) for ch in text)
    if used != len(bits):
        raise CorruptStream(f"{len(bits) - used} unused bits after {count} symbols")
    return text


def write_file(path: Union[str, Path], blob: bytes) -> None:
    Path(path).write_bytes(blob)


def read_file(path: Union[str, Path]) -> bytes:
    return Path(path).read_bytes()
