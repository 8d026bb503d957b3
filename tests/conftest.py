import struct

import pytest


def decode_geoip_dat(data: bytes):
    """Reads back what geodat.encoding.wire writes: [(code, [(ip, prefix)], reverse)]."""
    (count,) = struct.unpack_from("<I", data, 0)
    pos = 4
    entries = []
    for _ in range(count):
        assert data[pos] == 0x0A
        (n,) = struct.unpack_from("<I", data, pos + 1)
        pos += 5
        code = data[pos:pos + n].decode("utf-8")
        pos += n

        cidrs = []
        while data[pos] == 0x12:
            (size,) = struct.unpack_from("<I", data, pos + 1)
            assert size == 8
            pos += 5
            ip = ".".join(str(b) for b in data[pos:pos + 4])
            (prefix,) = struct.unpack_from("<I", data, pos + 4)
            cidrs.append((ip, prefix))
            pos += size

        assert data[pos] == 0x18
        reverse = bool(data[pos + 1])
        pos += 2
        entries.append((code, cidrs, reverse))

    assert pos == len(data), "trailing bytes"
    return entries


@pytest.fixture
def decode():
    return decode_geoip_dat


@pytest.fixture
def write_input(tmp_path):
    def _write(lines, name="input.txt"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
