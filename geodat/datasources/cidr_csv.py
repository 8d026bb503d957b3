# geodat/datasources/cidr_csv.py

from __future__ import annotations

import ipaddress
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd

from geodat.errors import CidrSourceError
from geodat.models import CidrRange
from geodat.utils.logging import get_logger

log = get_logger(__name__)

REQUIRED_COLUMNS = ("code", "cidr")


class CidrCsvSource:
    """
    CIDR ranges keyed by country code or region code, read from a CSV:

        code,cidr
        4-DX-BJ,1.0.1.0/24
        GD,14.16.0.0/12

    Keys may be a full code (``4-LT-GD-shenzhen``), a short code
    (``4-LT-GD``) or a bare region code (``GD``); see ``lookup``.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._ranges: Dict[str, List[CidrRange]] = {}
        self.loaded = False

    def load(self) -> "CidrCsvSource":
        if not self.path.is_file():
            raise CidrSourceError(f"CIDR map {self.path} does not exist.")

        try:
            df = pd.read_csv(self.path, comment="#", dtype=str, skipinitialspace=True)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise CidrSourceError(f"CIDR map {self.path} could not be read: {e}") from e
        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise CidrSourceError(
                f"CIDR map {self.path} is missing column(s): {', '.join(missing)}"
            )

        df = df.dropna(subset=list(REQUIRED_COLUMNS))
        bad = 0
        for code, cidr in zip(df["code"].str.strip(), df["cidr"].str.strip()):
            try:
                net = ipaddress.ip_network(cidr, strict=False)
            except ValueError:
                bad += 1
                log.warning("Ignoring invalid CIDR %r for %s", cidr, code)
                continue
            if net.version != 4:
                bad += 1
                log.warning("Ignoring non-IPv4 CIDR %s for %s", net, code)
                continue
            self._ranges.setdefault(code, []).append(
                CidrRange(str(net.network_address), net.prefixlen)
            )

        self.loaded = True
        log.info(
            "Loaded %d CIDR ranges for %d keys from %s (%d rejected)",
            sum(len(v) for v in self._ranges.values()),
            len(self._ranges),
            self.path,
            bad,
        )
        return self

    def lookup(self, *keys: str) -> List[CidrRange]:
        """Return the ranges of the first key that has any, else []."""
        if not self.loaded:
            self.load()
        for key in keys:
            ranges = self._ranges.get(key)
            if ranges:
                return list(ranges)
        return []
