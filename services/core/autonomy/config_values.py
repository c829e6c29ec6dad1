"""
Typed views over raw (string) config values.

A missing or empty value resolves to the supplied default. A present
value that does not parse raises CorruptConfigValue.
"""
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from exceptions import CorruptConfigValue


def parse_bool(key: str, raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise CorruptConfigValue(key, raw, "expected true or false")


def parse_number(key: str, raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise CorruptConfigValue(key, raw, "expected a finite number")
    if math.isnan(value) or math.isinf(value):
        raise CorruptConfigValue(key, raw, "expected a finite number")
    return value


def parse_int(key: str, raw: Optional[str], default: int) -> int:
    value = parse_number(key, raw, default)
    if value != int(value):
        raise CorruptConfigValue(key, raw, "expected an integer")
    return int(value)


def parse_list(raw: Optional[str], default: Iterable[str]) -> List[str]:
    if raw is None or not raw.strip():
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_timestamp(key: str, raw: Optional[str]) -> Optional[datetime]:
    if raw is None or not raw.strip():
        return None
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise CorruptConfigValue(key, raw, "expected an ISO-8601 timestamp")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_number(value: float) -> str:
    # 7.5 -> "7.5", 5 -> "5", 5.0 -> "5.0"
    return repr(value) if isinstance(value, float) else str(value)


def format_list(values: Iterable[str]) -> str:
    return ",".join(sorted(values))


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()
