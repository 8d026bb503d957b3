# geodat/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Union


class InputFormat(str, Enum):
    PIPE = "pipe"   # country|region|city|isp
    TAB = "tab"     # country\tregion\tcity\tisp (nominal .ipdb input)

    @property
    def delimiter(self) -> str:
        return "|" if self is InputFormat.PIPE else "\t"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "InputFormat":
        # The binary IPDB container is not decoded; .ipdb files are read as
        # tab-delimited text.
        if Path(path).suffix == ".ipdb":
            return cls.TAB
        return cls.PIPE


@dataclass
class GeoRecord:
    country_name: str       # "中国"
    region_name: str        # province / municipality, e.g. "广东"
    city_name: str          # falls back to region_name when missing
    isp_domain: str         # carrier, "未知" when missing


@dataclass(frozen=True)
class CidrRange:
    address: str            # dotted-decimal IPv4, kept as text
    prefix_len: int         # 0..32 for well-formed ranges


@dataclass
class GeoIpEntry:
    country_code: str                       # "4-DX-BJ" or "4-LT-GD-shenzhen"
    cidrs: List[CidrRange] = field(default_factory=list)
    reverse_match: bool = False
