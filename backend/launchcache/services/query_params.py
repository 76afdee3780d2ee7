"""
Launch Query Parameters

Turns loosely typed request input into an immutable filter set and derives
a canonical cache key from it.

Parsing is permissive: a malformed or missing value resolves to "no filter"
(or to the default for limit/sort) instead of failing the request.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, quote

from launchcache.models.launch import LaunchRecord

DEFAULT_LIMIT = 10
MIN_LIMIT = 1
MAX_LIMIT = 50

SORT_ASC = "asc"
SORT_DESC = "desc"

KEY_DELIMITER = "|"
ABSENT_MARKER = "-"

QueryInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def parse_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    text = raw.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or date-time into an aware UTC datetime.
    Naive input is taken to already be UTC.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text))
    except (ValueError, OverflowError):
        # Offsets near year 1 or 9999 overflow on conversion to UTC
        return None


def parse_limit(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_LIMIT
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_LIMIT
    return clamp_limit(value)


def parse_sort(raw: Optional[str]) -> str:
    if raw is not None and raw.strip().lower() == SORT_ASC:
        return SORT_ASC
    return SORT_DESC


def clamp_limit(value: int) -> int:
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _first_values(items: QueryInput) -> Dict[str, str]:
    """Lower-case the keys and keep the first value seen for each one."""
    pairs = items.items() if isinstance(items, Mapping) else items
    values: Dict[str, str] = {}
    for key, value in pairs:
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is None:
            continue
        values.setdefault(str(key).strip().lower(), str(value))
    return values


@dataclass(frozen=True)
class LaunchQueryParameters:
    success: Optional[bool] = None
    upcoming: Optional[bool] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    name_contains: Optional[str] = None
    limit: int = DEFAULT_LIMIT
    sort: str = SORT_DESC

    def __post_init__(self):
        # Normalize direct construction the same way parsing does, so equal
        # filters always compare (and key) equal.
        name = self.name_contains.strip() if self.name_contains else None
        object.__setattr__(self, "name_contains", name or None)
        object.__setattr__(self, "limit", clamp_limit(int(self.limit)))
        object.__setattr__(self, "sort", parse_sort(self.sort))
        if self.date_from is not None:
            object.__setattr__(self, "date_from", _as_utc(self.date_from))
        if self.date_to is not None:
            object.__setattr__(self, "date_to", _as_utc(self.date_to))

    @classmethod
    def from_query(cls, items: QueryInput) -> "LaunchQueryParameters":
        """
        Build parameters from a mapping or from (key, value) pairs.

        Keys are matched case-insensitively and the first occurrence of a
        repeated key wins. Never raises on bad values.
        """
        values = _first_values(items)
        return cls(
            success=parse_bool(values.get("success")),
            upcoming=parse_bool(values.get("upcoming")),
            date_from=parse_timestamp(values.get("from")),
            date_to=parse_timestamp(values.get("to")),
            name_contains=values.get("name"),
            limit=parse_limit(values.get("limit")),
            sort=parse_sort(values.get("sort")),
        )

    @classmethod
    def from_query_string(cls, raw: str) -> "LaunchQueryParameters":
        return cls.from_query(parse_qsl(raw.lstrip("?"), keep_blank_values=True))

    def to_cache_key(self) -> str:
        """
        Canonical key: fixed field order, fixed delimiter, normalized values.
        The name is percent-encoded so it can never contain the delimiter.
        """
        name = quote(self.name_contains.lower(), safe="") if self.name_contains else None
        segments = [
            ("success", _format_bool(self.success)),
            ("upcoming", _format_bool(self.upcoming)),
            ("from", _format_timestamp(self.date_from)),
            ("to", _format_timestamp(self.date_to)),
            ("name", name),
            ("limit", str(self.limit)),
            ("sort", self.sort),
        ]
        return KEY_DELIMITER.join(
            f"{field}={ABSENT_MARKER if value is None else value}" for field, value in segments
        )

    def matches(self, record: LaunchRecord) -> bool:
        if self.success is not None and record.success != self.success:
            return False
        if self.upcoming is not None and record.upcoming != self.upcoming:
            return False
        if self.date_from is not None and record.date_utc < self.date_from:
            return False
        if self.date_to is not None and record.date_utc > self.date_to:
            return False
        if self.name_contains is not None and self.name_contains.lower() not in record.name.lower():
            return False
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "upcoming": self.upcoming,
            "from": _format_timestamp(self.date_from),
            "to": _format_timestamp(self.date_to),
            "name": self.name_contains.lower() if self.name_contains else None,
            "limit": self.limit,
            "sort": self.sort,
        }


def _format_bool(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "true" if value else "false"
