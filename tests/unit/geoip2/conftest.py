"""GeoIP 测试公共夹具"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

CITY_RECORD = {
    "continent": {"code": "AS", "names": {"en": "Asia", "zh-CN": "亚洲"}},
    "country": {"iso_code": "CN", "names": {"en": "China", "zh-CN": "中国"}},
    "city": {"names": {"en": "Guangzhou", "zh-CN": "广州"}},
    "subdivisions": [{"iso_code": "GD", "names": {"en": "Guangdong", "zh-CN": "广东"}}],
    "location": {
        "time_zone": "Asia/Shanghai",
        "latitude": 23.1167,
        "longitude": 113.25,
        "accuracy_radius": 50,
    },
    "registered_country": {"iso_code": "CN", "names": {"en": "China", "zh-CN": "中国"}},
}

ASN_RECORD = {
    "autonomous_system_number": 4134,
    "autonomous_system_organization": "CHINANET-BACKBONE",
}


def make_metadata(database_type: str, node_count: int = 1024) -> SimpleNamespace:
    return SimpleNamespace(
        binary_format_major_version=2,
        binary_format_minor_version=0,
        ip_version=6,
        database_type=database_type,
        build_epoch=1735689600,
        node_count=node_count,
    )


def make_reader(record, database_type: str) -> MagicMock:
    reader = MagicMock()
    reader.get.return_value = record
    reader.metadata.return_value = make_metadata(database_type)
    return reader


@pytest.fixture
def city_record():
    return {k: v for k, v in CITY_RECORD.items()}


@pytest.fixture
def asn_record():
    return dict(ASN_RECORD)


@pytest.fixture
def asn_reader():
    return make_reader(ASN_RECORD, "GeoLite2-ASN")


@pytest.fixture
def city_reader():
    return make_reader(CITY_RECORD, "GeoLite2-City")


@pytest.fixture
def reader_factory():
    """按记录与库类型构造模拟 Reader"""
    return make_reader


@pytest.fixture
def metadata_factory():
    return make_metadata
