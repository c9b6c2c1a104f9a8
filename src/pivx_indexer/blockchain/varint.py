# src/pivx_indexer/blockchain/varint.py
import struct
from typing import BinaryIO

from ..exceptions import InvalidVarIntError, TruncatedReadError

MAX_VARINT = 0xFFFFFFFFFFFFFFFF

def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly size bytes or raise TruncatedReadError"""
    data = stream.read(size)
    if len(data) != size:
        raise TruncatedReadError(size, len(data))
    return data

def read_uint32(stream: BinaryIO) -> int:
    return struct.unpack('<I', read_exact(stream, 4))[0]

def read_varint(stream: BinaryIO) -> int:
    """Read a compact size integer.

    0x00-0xFC are literal, 0xFD/0xFE/0xFF prefix a 2/4/8 byte
    little-endian value.
    """
    first = read_exact(stream, 1)[0]
    if first < 0xFD:
        return first
    if first == 0xFD:
        return struct.unpack('<H', read_exact(stream, 2))[0]
    if first == 0xFE:
        return struct.unpack('<I', read_exact(stream, 4))[0]
    return struct.unpack('<Q', read_exact(stream, 8))[0]

def pack_varint(value: int) -> bytes:
    """Encode value with the shortest compact size form"""
    if value < 0 or value > MAX_VARINT:
        raise InvalidVarIntError(f"value out of range: {value}")
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b'\xfd' + struct.pack('<H', value)
    if value <= 0xFFFFFFFF:
        return b'\xfe' + struct.pack('<I', value)
    return b'\xff' + struct.pack('<Q', value)

def pack_varbytes(data: bytes) -> bytes:
    return pack_varint(len(data)) + data
