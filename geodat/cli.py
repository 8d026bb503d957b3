from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from geodat.config import DEFAULT_INPUT, DEFAULT_OUTPUT
from geodat.datasources.base import datasource_to_dataframe
from geodat.datasources.cidr_csv import CidrCsvSource
from geodat.datasources.text_lines import TextRecordSource
from geodat.errors import GeoDatError
from geodat.generate import generate as generate_dat
from geodat.models import InputFormat
from geodat.processing.codes import UNKNOWN_NAME, create_country_codes
from geodat.processing.table import summarize_table
from geodat.utils.logging import get_logger, set_level

app = typer.Typer(help="Build geoip.dat lookup tables from Chinese IP-geolocation records.")

log = get_logger(__name__)


class FormatChoice(str, Enum):
    auto = "auto"
    pipe = "pipe"
    tab = "tab"


class IpVersion(str, Enum):
    v4 = "4"
    v6 = "6"


def _resolve_format(fmt: FormatChoice) -> Optional[InputFormat]:
    if fmt == FormatChoice.auto:
        return None
    return InputFormat(fmt.value)


@app.callback()
def _root(
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-V",
            help="Log debug output (every skipped line, every generated code).",
        ),
):
    set_level(logging.DEBUG if verbose else logging.INFO)


@app.command()
def generate(
        input: Path = typer.Argument(
            Path(DEFAULT_INPUT),
            help="Geolocation text file, one country|region|city|isp record per line.",
        ),
        output: Path = typer.Argument(
            Path(DEFAULT_OUTPUT),
            help="Where to write the binary table (overwritten if present).",
        ),
        fmt: FormatChoice = typer.Option(
            FormatChoice.auto,
            "--format",
            "-f",
            help="Field delimiter: auto (tab for .ipdb, pipe otherwise) | pipe | tab",
        ),
        cidr_map: Optional[Path] = typer.Option(
            None,
            "--cidr-map",
            "-c",
            help=(
                    "CSV with code,cidr columns giving the real ranges per code. "
                    "Keys may be full codes, short codes or region codes. "
                    "Without it every code gets the 192.168.1.0/24 placeholder."
            ),
        ),
        ip_version: IpVersion = typer.Option(
            IpVersion.v4,
            "--ip-version",
            help="IP version prefix used in generated codes: 4 | 6",
        ),
        strict: bool = typer.Option(
            False,
            "--strict",
            help="Fail on malformed CIDRs instead of writing them as 0.0.0.0.",
        ),
        show_table: bool = typer.Option(
            False,
            "--show-table",
            help="Print one line per generated code after writing.",
        ),
):
    """
    Generate geoip.dat from a geolocation text dump.

    Example:

        geodat generate qqwry.txt geoip.dat
        geodat generate ip.ipdb out/geoip.dat --cidr-map cidrs.csv
    """
    try:
        cidr_source = CidrCsvSource(cidr_map).load() if cidr_map is not None else None
        result = generate_dat(
            input,
            output,
            fmt=_resolve_format(fmt),
            cidr_source=cidr_source,
            ip_version=ip_version.value,
            strict=strict,
        )
    except GeoDatError as e:
        log.error("%s", e)
        raise typer.Exit(code=1)

    if show_table:
        df = summarize_table(result.table)
        if not df.empty:
            typer.echo(df.to_string(index=False))

    typer.echo(f"Generated {result.output_path} with {result.num_entries} entries")


@app.command()
def codes(
        region: str = typer.Argument(..., help="Region name, e.g. 广东"),
        city: str = typer.Argument("", help="City name, e.g. 深圳 (defaults to the region)"),
        isp: str = typer.Argument(UNKNOWN_NAME, help="ISP name, e.g. 联通"),
        country: str = typer.Option("中国", "--country", help="Country name"),
        ip_version: IpVersion = typer.Option(IpVersion.v4, "--ip-version"),
):
    """Print the country codes one record would be filed under."""
    result = create_country_codes(
        country,
        region,
        city or region,
        ip_version=ip_version.value,
        isp_domain=isp,
    )
    if not result:
        typer.echo(f"No codes: only 中国 records are kept (got {country!r}).", err=True)
        raise typer.Exit(code=1)
    for code in result:
        typer.echo(code)


@app.command()
def inspect(
        input: Path = typer.Argument(Path(DEFAULT_INPUT), help="Geolocation text file."),
        fmt: FormatChoice = typer.Option(FormatChoice.auto, "--format", "-f"),
        top: int = typer.Option(10, "--top", help="How many regions / ISPs to list."),
):
    """Show record counts per country, region and ISP without writing anything."""
    source = TextRecordSource(input, fmt=_resolve_format(fmt))
    try:
        df = datasource_to_dataframe(source)
    except GeoDatError as e:
        log.error("%s", e)
        raise typer.Exit(code=1)

    typer.echo(f"{len(df)} records, {source.skipped} malformed lines skipped")
    if df.empty:
        return
    for col, label in (("country_name", "countries"), ("region_name", "regions"), ("isp_domain", "ISPs")):
        counts = df[col].value_counts().head(top)
        typer.echo(f"\nTop {label}:")
        typer.echo(counts.to_string())


def main() -> None:
    """Entry point for console_scripts."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Interrupted by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
