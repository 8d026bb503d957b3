# geodat/encoding/wire.py

"""
Writer for the geoip.dat binary table.

File layout::

    u32le  entry count
    entry  * count

Entry layout, fields always in this order::

    0x0A  u32le len  utf-8 country code          field 1, length-delimited
    0x12  u32le 8    4 address bytes, u32le len  field 2, once per CIDR
    0x18  u8         reverse-match flag          field 3, 0 or 1

Tags follow protobuf's ``(field << 3) | wire_type`` convention, but lengths
are fixed 4-byte little-endian integers rather than varints, so a stock
protobuf decoder cannot read this.
"""

from __future__ import annotations

import ipaddress
import re
import struct
from pathlib import Path
from typing import Iterable, Mapping, Sequence, Tuple, Union

from geodat.errors import InvalidCidrError
from geodat.models import CidrRange, GeoIpEntry
from geodat.utils.logging import get_logger

log = get_logger(__name__)

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2

_U32LE = struct.Struct("<I")
_LEADING_INT = re.compile(r"\s*[+-]?[0-9]+")


def make_tag(field_number: int, wire_type: int) -> int:
    return (field_number << 3) | wire_type


TAG_COUNTRY_CODE = make_tag(1, WIRE_LENGTH_DELIMITED)   # 0x0A
TAG_CIDR = make_tag(2, WIRE_LENGTH_DELIMITED)           # 0x12
TAG_REVERSE_MATCH = make_tag(3, WIRE_VARINT)            # 0x18

CIDR_MESSAGE_SIZE = 8

CidrLike = Union[CidrRange, Tuple[str, int]]


class ByteWriter:
    """Append-only byte buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def tell(self) -> int:
        return len(self._buf)

    def write_u8(self, value: int) -> None:
        self._buf.append(value & 0xFF)

    def write_u32le(self, value: int) -> None:
        self._buf += _U32LE.pack(value & 0xFFFFFFFF)

    def write_bytes(self, data: bytes) -> None:
        self._buf += data

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def _as_cidr(cidr: CidrLike) -> CidrRange:
    if isinstance(cidr, CidrRange):
        return cidr
    address, prefix_len = cidr
    return CidrRange(address, prefix_len)


def _address_bytes(ip: str) -> bytes:
    """Four octets of a dotted quad; anything that is not four parts is 0.0.0.0."""
    parts = ip.split(".") if ip else []
    if len(parts) != 4:
        return bytes(4)
    octets = []
    for part in parts:
        # leading ASCII digits only: "12abc" -> 12, "1_0" -> 1, "x" -> 0
        m = _LEADING_INT.match(part)
        octets.append(int(m.group(0)) & 0xFF if m else 0)
    return bytes(octets)


def write_length_prefixed_string(writer: ByteWriter, s: str) -> None:
    data = s.encode("utf-8")
    writer.write_u32le(len(data))
    writer.write_bytes(data)


def write_cidr(writer: ByteWriter, ip: str, prefix_len: int) -> None:
    writer.write_bytes(_address_bytes(ip))
    writer.write_u32le(prefix_len)


def validate_cidr(cidr: CidrLike) -> CidrRange:
    """
    Strict check used by ``encode_table(strict=True)``: the address must be
    a dotted-quad IPv4 address and the prefix must lie in 0..32.
    """
    cidr = _as_cidr(cidr)
    try:
        ipaddress.IPv4Address(cidr.address)
    except ValueError as e:
        raise InvalidCidrError(f"invalid IPv4 address {cidr.address!r}") from e
    if not 0 <= cidr.prefix_len <= 32:
        raise InvalidCidrError(f"invalid prefix length {cidr.prefix_len} for {cidr.address}")
    return cidr


def write_entry(writer: ByteWriter, entry: GeoIpEntry) -> None:
    writer.write_u8(TAG_COUNTRY_CODE)
    write_length_prefixed_string(writer, entry.country_code)

    for cidr in entry.cidrs:
        cidr = _as_cidr(cidr)
        writer.write_u8(TAG_CIDR)
        writer.write_u32le(CIDR_MESSAGE_SIZE)
        write_cidr(writer, cidr.address, cidr.prefix_len)

    writer.write_u8(TAG_REVERSE_MATCH)
    writer.write_u8(1 if entry.reverse_match else 0)


def encode_entry(entry: GeoIpEntry) -> bytes:
    writer = ByteWriter()
    write_entry(writer, entry)
    return writer.getvalue()


def _entries(table: Union[Mapping[str, Sequence[CidrLike]], Iterable[GeoIpEntry]]):
    if isinstance(table, Mapping):
        return [GeoIpEntry(code, [_as_cidr(c) for c in cidrs]) for code, cidrs in table.items()]
    return list(table)


def encode_table(
        table: Union[Mapping[str, Sequence[CidrLike]], Iterable[GeoIpEntry]],
        strict: bool = False,
) -> bytes:
    """
    Serialize a whole table: an ordered ``code -> cidrs`` mapping or a
    sequence of GeoIpEntry. Entries keep their iteration order.

    Malformed addresses are written as 0.0.0.0 unless ``strict`` is set,
    in which case they raise InvalidCidrError.
    """
    entries = _entries(table)
    if strict:
        for entry in entries:
            for cidr in entry.cidrs:
                validate_cidr(cidr)

    writer = ByteWriter()
    writer.write_u32le(len(entries))
    for entry in entries:
        write_entry(writer, entry)

    log.debug("Encoded %d entries into %d bytes", len(entries), writer.tell())
    return writer.getvalue()


def write_geoip_dat(
        table: Union[Mapping[str, Sequence[CidrLike]], Iterable[GeoIpEntry]],
        path: Union[str, Path],
        strict: bool = False,
) -> int:
    """Encode ``table`` and write it to ``path``, replacing any existing file."""
    data = encode_table(table, strict=strict)
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(data)
    log.debug("Wrote %d bytes to %s", len(data), out_path)
    return len(data)
