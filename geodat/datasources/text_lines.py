# geodat/datasources/text_lines.py

from __future__ import annotations

import string
from pathlib import Path
from typing import Iterator, List, Optional, Union

from geodat.datasources.base import DataSource
from geodat.errors import InputFileNotFoundError
from geodat.models import GeoRecord, InputFormat
from geodat.processing.codes import UNKNOWN_NAME
from geodat.utils.logging import get_logger

log = get_logger(__name__)

REQUIRED_FIELDS = 4


def parse_line(line: str, fmt: InputFormat) -> Optional[GeoRecord]:
    """
    Split one ``country<d>region<d>city<d>isp`` line.

    Returns None when the line has fewer than four fields. Empty fields
    are filled in: city from region, the rest with ``未知``.
    """
    delim = fmt.delimiter
    # trim surrounding whitespace but keep trailing delimiters, so
    # "中国\t北京\t\t" still has four (partly empty) fields
    line = line.strip(string.whitespace.replace(delim, ""))

    parts = [p.strip() for p in line.split(delim)]
    if len(parts) < REQUIRED_FIELDS:
        return None

    country, region, city, isp = parts[:REQUIRED_FIELDS]
    region = region or UNKNOWN_NAME
    return GeoRecord(
        country_name=country or UNKNOWN_NAME,
        region_name=region,
        city_name=city or region,
        isp_domain=isp or UNKNOWN_NAME,
    )


class TextRecordSource(DataSource):
    """
    Newline-delimited geolocation text, one record per line.

    The whole file is read up front; blank lines are ignored and lines with
    too few fields are counted in ``skipped``.
    """

    def __init__(
            self,
            path: Union[str, Path],
            fmt: Optional[InputFormat] = None,
            encoding: str = "utf-8",
            errors: str = "replace",
    ) -> None:
        self.path = Path(path)
        self.fmt = fmt or InputFormat.from_path(self.path)
        self.encoding = encoding
        self.errors = errors
        self.skipped = 0

    def read_lines(self) -> List[str]:
        if not self.path.is_file():
            raise InputFileNotFoundError(self.path)
        # undecodable bytes become U+FFFD so a stray GBK line cannot abort the run
        with open(self.path, encoding=self.encoding, errors=self.errors, newline="") as f:
            text = f.read()
        return [line for line in text.split("\n") if line.strip()]

    def load(self) -> Iterator[GeoRecord]:
        lines = self.read_lines()
        log.info("Reading %d lines from %s (format=%s)", len(lines), self.path, self.fmt.value)

        self.skipped = 0
        for line in lines:
            rec = parse_line(line, self.fmt)
            if rec is None:
                self.skipped += 1
                log.debug("Skipping malformed line: %r", line)
                continue
            yield rec

        if self.skipped:
            log.info("Skipped %d malformed lines in %s", self.skipped, self.path)
