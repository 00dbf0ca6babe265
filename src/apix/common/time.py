"""时间转换，统一使用带时区的 UTC datetime"""

from datetime import UTC, datetime


def now_utc() -> datetime:
    return datetime.now(UTC)


def time_to_millis(dt: datetime) -> int:
    """datetime 转 Unix 毫秒，naive datetime 视为 UTC"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def from_timestamp(ts: int | float, unit: str = "s") -> datetime:
    """Unix 时间戳转 UTC datetime

    Args:
        ts: 时间戳
        unit: "s" 或 "ms"
    """
    seconds = ts / 1000 if unit == "ms" else ts
    return datetime.fromtimestamp(seconds, tz=UTC)
