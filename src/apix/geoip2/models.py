"""GeoIP 数据模型

mmdb 记录中的语言键为 zh-CN，对外输出统一为 zh-cn。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apix.common.time import from_timestamp


class Names(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    zh_cn: str = Field(default="", alias="zh-cn")
    en: str = ""

    @classmethod
    def from_record(cls, names: dict | None) -> "Names":
        names = names or {}
        return cls(zh_cn=names.get("zh-CN", ""), en=names.get("en", ""))


class Continent(BaseModel):
    code: str = ""
    names: Names = Field(default_factory=Names)


class Country(BaseModel):
    iso_code: str = ""
    names: Names = Field(default_factory=Names)


class City(BaseModel):
    names: Names = Field(default_factory=Names)


class Subdivision(BaseModel):
    iso_code: str = ""
    names: Names = Field(default_factory=Names)


class Location(BaseModel):
    time_zone: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy_radius: int = 0


class GeoResult(BaseModel):
    """查询结果"""

    continent: Continent = Field(default_factory=Continent)
    country: Country = Field(default_factory=Country)
    city: City = Field(default_factory=City)
    subdivisions: list[Subdivision] = Field(default_factory=list)
    location: Location = Field(default_factory=Location)
    registered_country: Country = Field(default_factory=Country)
    organization: str = ""

    @classmethod
    def from_records(cls, asn: dict | None, city: dict | None) -> "GeoResult":
        """由 ASN 与 City 两个库的原始记录构建结果"""
        asn = asn or {}
        city = city or {}

        def _region(data: Any) -> dict:
            data = data if isinstance(data, dict) else {}
            return {
                "iso_code": data.get("iso_code", ""),
                "names": Names.from_record(data.get("names")),
            }

        continent = city.get("continent") or {}
        location = city.get("location") or {}
        return cls(
            continent=Continent(
                code=continent.get("code", ""),
                names=Names.from_record(continent.get("names")),
            ),
            country=Country(**_region(city.get("country"))),
            city=City(names=Names.from_record((city.get("city") or {}).get("names"))),
            subdivisions=[Subdivision(**_region(item)) for item in city.get("subdivisions") or []],
            location=Location(
                time_zone=location.get("time_zone", ""),
                latitude=location.get("latitude", 0.0),
                longitude=location.get("longitude", 0.0),
                accuracy_radius=location.get("accuracy_radius", 0),
            ),
            registered_country=Country(**_region(city.get("registered_country"))),
            organization=asn.get("autonomous_system_organization", ""),
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DBMeta(BaseModel):
    """数据库元信息"""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    ip_version: str = Field(alias="ipVersion")
    database_type: str = Field(alias="type")
    build_epoch: datetime = Field(alias="buildEpoch")

    @classmethod
    def from_metadata(cls, meta: Any) -> "DBMeta":
        return cls(
            version=f"{meta.binary_format_major_version}.{meta.binary_format_minor_version}",
            ip_version=str(meta.ip_version),
            database_type=meta.database_type,
            build_epoch=from_timestamp(meta.build_epoch),
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
