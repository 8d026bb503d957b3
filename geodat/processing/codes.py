# geodat/processing/codes.py

from __future__ import annotations

from types import MappingProxyType
from typing import List, Optional

from pypinyin import Style, lazy_pinyin

from geodat.config import DEFAULT_IP_VERSION
from geodat.utils.logging import get_logger

log = get_logger(__name__)

CHINA = "中国"
UNKNOWN_NAME = "未知"
UNKNOWN_ISP = "UN"

ISP_CODES = MappingProxyType({
    "电信": "DX",
    "联通": "LT",
    "移动": "YD",
    "铁通": "TT",
    "华数": "HS",
    UNKNOWN_NAME: UNKNOWN_ISP,
})

REGION_CODES = MappingProxyType({
    # municipalities
    "北京": "BJ",
    "上海": "SH",
    "天津": "TJ",
    "重庆": "CQ",
    # provinces
    "广东": "GD",
    "浙江": "ZJ",
    "江苏": "JS",
    "山东": "SD",
    "福建": "FJ",
    "安徽": "AH",
    "河南": "HA",
    "湖北": "HB",
    "湖南": "HN",
    "江西": "JX",
    "四川": "SC",
    "陕西": "SN",
    "山西": "SX",
    "辽宁": "LN",
    "吉林": "JL",
    "黑龙江": "HL",
    "河北": "HE",
    "台湾": "TW",
    "海南": "HI",
    "甘肃": "GS",
    "青海": "QH",
    "贵州": "GZ",
    "云南": "YN",
    # autonomous regions
    "宁夏": "NX",
    "新疆": "XJ",
    "西藏": "XZ",
    "内蒙古": "NM",
    "广西": "GX",
    # special administrative regions
    "香港": "HK",
    "澳门": "MO",
})


def country_code(country_name: str) -> Optional[str]:
    """Only mainland records are kept; everything else maps to None."""
    if country_name == CHINA:
        return "CN"
    return None


def region_code(region_name: str) -> str:
    """
    Map a province/municipality name to its two-letter code.

    Unknown names fall back to their first three characters, upper-cased.
    An empty name yields an empty code.
    """
    code = REGION_CODES.get(region_name)
    if code is not None:
        return code
    return region_name[:3].upper()


def isp_code(isp_name: str) -> str:
    """
    Map a carrier name to its code by looking at its first two characters
    (or the only one). Anything unrecognised is ``UN``.
    """
    if not isp_name:
        return UNKNOWN_ISP
    return ISP_CODES.get(isp_name[:2], UNKNOWN_ISP)


def city_pinyin(city_name: str) -> str:
    """
    Tone-free pinyin of a city name with words run together,
    e.g. ``"深圳" -> "shenzhen"``.

    Characters pypinyin cannot romanize (latin letters, digits, other
    scripts) are passed through as they are.
    """
    return "".join(lazy_pinyin(city_name, style=Style.NORMAL))


def create_country_codes(
        country_name: str,
        region_name: str,
        city_name: str,
        ip_version: str = DEFAULT_IP_VERSION,
        isp_domain: str = UNKNOWN_NAME,
) -> List[str]:
    """
    Build the grouping keys for one record.

    Returns ``[]`` for non-China records. Otherwise the short form
    ``<ver>-<isp>-<region>`` is always present and the long form
    ``<ver>-<isp>-<region>-<city pinyin>`` is added when the city differs
    from the region.
    """
    if country_code(country_name) is None:
        return []

    region = region_code(region_name)
    isp = isp_code(isp_domain)

    codes = [f"{ip_version}-{isp}-{region}"]
    if city_name and city_name != region_name:
        codes.append(f"{ip_version}-{isp}-{region}-{city_pinyin(city_name)}")

    log.debug("%s/%s/%s -> %s", region_name, city_name, isp_domain, codes)
    return codes
