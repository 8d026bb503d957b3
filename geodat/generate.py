# geodat/generate.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from geodat.config import DEFAULT_IP_VERSION
from geodat.datasources.cidr_csv import CidrCsvSource
from geodat.datasources.text_lines import TextRecordSource
from geodat.encoding.wire import write_geoip_dat
from geodat.errors import InputFileNotFoundError
from geodat.models import InputFormat
from geodat.processing.table import OutputTable, TableBuilder
from geodat.utils.logging import get_logger

log = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass
class GenerateResult:
    output_path: Path
    num_entries: int
    records_read: int
    lines_skipped: int
    records_dropped: int
    bytes_written: int
    table: OutputTable = field(repr=False, default_factory=dict)
    unmapped_codes: List[str] = field(default_factory=list)


def generate(
        input_path: PathLike,
        output_path: PathLike,
        fmt: Optional[InputFormat] = None,
        cidr_source: Optional[CidrCsvSource] = None,
        ip_version: str = DEFAULT_IP_VERSION,
        strict: bool = False,
) -> GenerateResult:
    """
    Build ``output_path`` (geoip.dat) from the records in ``input_path``.

    Raises InputFileNotFoundError, without touching ``output_path``, when
    the input does not exist. The input format defaults to one picked from
    the file extension (see InputFormat.from_path).
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    if not input_path.is_file():
        raise InputFileNotFoundError(input_path)

    source = TextRecordSource(input_path, fmt=fmt)
    builder = TableBuilder(cidr_source=cidr_source, ip_version=ip_version)
    for record in source.load():
        builder.add(record)
    table = builder.finish()

    size = write_geoip_dat(table, output_path, strict=strict)
    log.debug("Wrote %d entries (%d bytes) to %s", len(table), size, output_path)

    return GenerateResult(
        output_path=output_path,
        num_entries=len(table),
        records_read=builder.records_seen,
        lines_skipped=source.skipped,
        records_dropped=builder.records_dropped,
        bytes_written=size,
        table=table,
        unmapped_codes=list(builder.unmapped_codes),
    )
