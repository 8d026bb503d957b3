# geodat/processing/table.py

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from geodat.config import DEFAULT_IP_VERSION, PLACEHOLDER_CIDR
from geodat.datasources.cidr_csv import CidrCsvSource
from geodat.models import CidrRange, GeoRecord
from geodat.processing.codes import create_country_codes, region_code
from geodat.utils.logging import get_logger

log = get_logger(__name__)

# country code -> CIDR ranges, in first-seen order
OutputTable = Dict[str, List[CidrRange]]

SUMMARY_COLUMNS = ["code", "ip_version", "isp", "region", "city", "num_cidrs"]


class TableBuilder:
    """
    Groups CIDR ranges under the country codes generated for each record.

    With no ``cidr_source`` every code gets the placeholder range once per
    record that produced it. With a source, ranges are looked up by full
    code, then short code, then region code; codes that find nothing are
    left out of the table.
    """

    def __init__(
            self,
            cidr_source: Optional[CidrCsvSource] = None,
            ip_version: str = DEFAULT_IP_VERSION,
    ) -> None:
        self.cidr_source = cidr_source
        self.ip_version = ip_version
        self.table: OutputTable = {}
        self.records_seen = 0
        self.records_dropped = 0
        self.unmapped_codes: List[str] = []

    def _cidrs_for(self, code: str, short_code: str, record: GeoRecord) -> List[CidrRange]:
        if self.cidr_source is None:
            return [CidrRange(*PLACEHOLDER_CIDR)]
        return self.cidr_source.lookup(code, short_code, region_code(record.region_name))

    def add(self, record: GeoRecord) -> List[str]:
        """Add one record; returns the codes it contributed to."""
        self.records_seen += 1
        codes = create_country_codes(
            record.country_name,
            record.region_name,
            record.city_name,
            ip_version=self.ip_version,
            isp_domain=record.isp_domain,
        )
        if not codes:
            self.records_dropped += 1
            return []

        added = []
        for code in codes:
            cidrs = self._cidrs_for(code, codes[0], record)
            if not cidrs:
                if code not in self.table and code not in self.unmapped_codes:
                    self.unmapped_codes.append(code)
                continue
            self.table.setdefault(code, []).extend(cidrs)
            added.append(code)
        return added

    def finish(self) -> OutputTable:
        # a code can be unmapped for one record and mapped for a later one
        self.unmapped_codes = [c for c in self.unmapped_codes if c not in self.table]
        if self.records_dropped:
            log.info("Dropped %d non-China records", self.records_dropped)
        if self.unmapped_codes:
            log.warning(
                "%d codes had no CIDR ranges and were left out, e.g. %s",
                len(self.unmapped_codes),
                ", ".join(self.unmapped_codes[:5]),
            )
        return self.table


def summarize_table(table: OutputTable) -> pd.DataFrame:
    """
    One row per code with its parts split out and the number of ranges,
    in table order.
    """
    if not table:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame({
        "code": list(table.keys()),
        "num_cidrs": [len(v) for v in table.values()],
    })
    parts = df["code"].str.split("-", n=3, expand=True).reindex(columns=range(4))
    df["ip_version"] = parts[0]
    df["isp"] = parts[1]
    df["region"] = parts[2]
    df["city"] = parts[3].fillna("")
    return df[SUMMARY_COLUMNS]
