import pytest

from geodat.datasources.base import RECORD_COLUMNS, datasource_to_dataframe
from geodat.datasources.text_lines import TextRecordSource, parse_line
from geodat.errors import InputFileNotFoundError
from geodat.models import GeoRecord, InputFormat


def test_parse_pipe_line():
    rec = parse_line("中国|广东|深圳|联通", InputFormat.PIPE)
    assert rec == GeoRecord("中国", "广东", "深圳", "联通")


def test_parse_tab_line():
    rec = parse_line("中国\t北京\t北京\t电信", InputFormat.TAB)
    assert rec == GeoRecord("中国", "北京", "北京", "电信")


def test_parse_strips_whitespace():
    rec = parse_line("  中国 | 广东 | 深圳 | 联通 \r", InputFormat.PIPE)
    assert rec == GeoRecord("中国", "广东", "深圳", "联通")


@pytest.mark.parametrize("line", [
    "中国|广东|深圳",
    "中国",
    "",
    "中国\t广东\t深圳\t联通",   # wrong delimiter
])
def test_parse_rejects_short_lines(line):
    assert parse_line(line, InputFormat.PIPE) is None


def test_parse_fills_missing_city_and_isp():
    rec = parse_line("中国|广东||", InputFormat.PIPE)
    assert rec.city_name == "广东"
    assert rec.isp_domain == "未知"


def test_parse_tab_keeps_trailing_empty_fields():
    rec = parse_line("中国\t广东\t\t\n", InputFormat.TAB)
    assert rec == GeoRecord("中国", "广东", "广东", "未知")


def test_parse_ignores_extra_fields():
    rec = parse_line("中国|广东|深圳|联通|extra|1.2.3.4", InputFormat.PIPE)
    assert rec == GeoRecord("中国", "广东", "深圳", "联通")


def test_format_from_path():
    assert InputFormat.from_path("qqwry.ipdb") is InputFormat.TAB
    assert InputFormat.from_path("data/qqwry.txt") is InputFormat.PIPE
    assert InputFormat.from_path("noext") is InputFormat.PIPE


def test_source_skips_blank_and_malformed(write_input):
    path = write_input([
        "中国|广东|深圳|联通",
        "",
        "   ",
        "broken|line",
        "中国|北京|北京|电信",
    ])
    source = TextRecordSource(path)
    records = list(source.load())
    assert [r.region_name for r in records] == ["广东", "北京"]
    assert source.skipped == 1


def test_source_tab_for_ipdb(write_input):
    path = write_input(["中国\t北京\t北京\t电信"], name="qqwry.ipdb")
    source = TextRecordSource(path)
    assert source.fmt is InputFormat.TAB
    assert list(source.load()) == [GeoRecord("中国", "北京", "北京", "电信")]


def test_source_missing_file(tmp_path):
    source = TextRecordSource(tmp_path / "nope.txt")
    with pytest.raises(InputFileNotFoundError):
        list(source.load())


def test_datasource_to_dataframe(write_input):
    path = write_input(["中国|广东|深圳|联通", "美国|加州|洛杉矶|AT&T"])
    df = datasource_to_dataframe(TextRecordSource(path))
    assert list(df.columns) == RECORD_COLUMNS
    assert df["country_name"].tolist() == ["中国", "美国"]


def test_datasource_to_dataframe_empty(write_input):
    path = write_input(["bad"])
    df = datasource_to_dataframe(TextRecordSource(path))
    assert df.empty
    assert list(df.columns) == RECORD_COLUMNS


def test_source_survives_undecodable_bytes(tmp_path):
    path = tmp_path / "mixed.txt"
    path.write_bytes(
        "中国|广东|深圳|联通\n".encode("utf-8")
        + "中国|北京|北京|电信\n".encode("gbk")
        + "中国|上海|上海|移动\n".encode("utf-8")
    )
    records = list(TextRecordSource(path).load())
    assert records[0] == GeoRecord("中国", "广东", "深圳", "联通")
    assert records[-1] == GeoRecord("中国", "上海", "上海", "移动")
    assert all(r.country_name != "中国" for r in records[1:-1])


def test_source_strict_decoding_can_be_requested(tmp_path):
    path = tmp_path / "gbk.txt"
    path.write_bytes("中国|北京|北京|电信\n".encode("gbk"))
    with pytest.raises(UnicodeDecodeError):
        list(TextRecordSource(path, errors="strict").load())


def test_source_splits_on_newline_only(tmp_path):
    path = tmp_path / "ctrl.txt"
    path.write_text("中国|广东|深\x0c圳|联通\r\n中国|北京|北京|电信\n", encoding="utf-8")
    source = TextRecordSource(path)
    records = list(source.load())
    assert [r.region_name for r in records] == ["广东", "北京"]
    assert records[0].city_name == "深\x0c圳"
    assert records[0].isp_domain == "联通"
    assert source.skipped == 0
