# geodat/datasources/base.py

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Iterator

import pandas as pd

from geodat.models import GeoRecord

RECORD_COLUMNS = ["country_name", "region_name", "city_name", "isp_domain"]


class DataSource(ABC):
    """A source of parsed geolocation records."""

    @abstractmethod
    def load(self) -> Iterator[GeoRecord]:
        ...


def datasource_to_dataframe(ds: DataSource) -> pd.DataFrame:
    """
    Materialize every record of ``ds`` into a DataFrame with one column per
    GeoRecord field, in input order.
    """
    rows = [asdict(rec) for rec in ds.load()]
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)
