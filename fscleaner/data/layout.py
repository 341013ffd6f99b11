from __future__ import annotations
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Optional, Tuple

TENANT = "tenant"
YEAR = "year"
MONTH = "month"
DAY = "day"
ROLES: Tuple[str, ...] = (TENANT, YEAR, MONTH, DAY)

# Y/M/D with month and day not zero-padded (a leading zero is still accepted)
_YEAR_RE = re.compile(r"[0-9]{4}")
_MONTH_DAY_RE = re.compile(r"[0-9]{1,2}")


class MalformedPartitionError(ValueError):
    """A terminal-depth path whose year/month/day tokens do not form a date."""


@dataclass(frozen=True)
class PartitionLayout:
    """Field role captured at each nesting depth below the data root.

    ``levels[0]`` is depth 1. ``None`` marks a level that is traversed but not
    captured (device/category). Expiry is evaluated one level past the last
    entry, so the subtree handed to deletion is the last captured directory.
    """
    levels: Tuple[Optional[str], ...] = (TENANT, None, YEAR, MONTH, DAY)

    def __post_init__(self):
        named = [r for r in self.levels if r is not None]
        unknown = sorted(set(named) - set(ROLES))
        if unknown:
            raise ValueError(f"unknown layout roles: {unknown}")
        for role in ROLES:
            if named.count(role) != 1:
                raise ValueError(f"layout must place '{role}' exactly once, got {self.levels}")

    @property
    def depth(self) -> int:
        return len(self.levels)

    def role_at(self, depth: int) -> Optional[str]:
        return self.levels[depth - 1]


DEFAULT_LAYOUT = PartitionLayout()


@dataclass(frozen=True)
class PathContext:
    tenant: Optional[str] = None
    year: Optional[str] = None
    month: Optional[str] = None
    day: Optional[str] = None

    def bind(self, role: Optional[str], name: str) -> "PathContext":
        if role is None:
            return self
        return replace(self, **{role: name})

    @property
    def date_token(self) -> str:
        return f"{self.year}/{self.month}/{self.day}"

    def partition_date(self) -> date:
        """Calendar date named by the branch, e.g. ``2020/1/15``."""
        y, m, d = self.year or "", self.month or "", self.day or ""
        if not (_YEAR_RE.fullmatch(y) and _MONTH_DAY_RE.fullmatch(m) and _MONTH_DAY_RE.fullmatch(d)):
            raise MalformedPartitionError(f"cannot parse partition date {self.date_token!r}")
        try:
            return date(int(y), int(m), int(d))
        except ValueError as e:
            raise MalformedPartitionError(f"cannot parse partition date {self.date_token!r}: {e}") from e


def partition_midnight(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
