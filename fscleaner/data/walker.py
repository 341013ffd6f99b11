from __future__ import annotations
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Union

from loguru import logger

from fscleaner.core.policy import PolicyResolver
from fscleaner.data.layout import (
    DEFAULT_LAYOUT,
    TENANT,
    MalformedPartitionError,
    PartitionLayout,
    PathContext,
    partition_midnight,
)

SECONDS_PER_DAY = 86_400


def age_in_days(reference_time: datetime, partition_date: date) -> int:
    """Whole days between midnight UTC of ``partition_date`` and ``reference_time``.

    Partial days are dropped (truncation toward zero), so a directory dated
    today is 0 days old for the whole day.
    """
    if reference_time.tzinfo is None:
        reference_time = reference_time.replace(tzinfo=timezone.utc)
    delta = reference_time - partition_midnight(partition_date)
    return int(delta.total_seconds() / SECONDS_PER_DAY)


class ExpiryWalker:
    """
    Fixed-depth walk over a date partitioned tree:
      {root}/{tenant}/{device}/{YYYY}/{M}/{D}/...

    Everything below the day directory is left unexamined; once the date is
    known the whole day subtree is one deletion unit.
    """
    def __init__(self, resolver: PolicyResolver, reference_time: Optional[datetime] = None,
                 layout: PartitionLayout = DEFAULT_LAYOUT, strict_dates: bool = True):
        self.resolver = resolver
        # single clock for the run so ages stay consistent however long the walk takes
        ref = reference_time or datetime.now(timezone.utc)
        if ref.tzinfo is None:
            ref = ref.replace(tzinfo=timezone.utc)
        self.reference_time = ref
        self.layout = layout
        self.strict_dates = strict_dates

    def walk(self, root: Union[str, Path]) -> List[Path]:
        """Collect every expired subtree under ``root``.

        A malformed date aborts the walk with ``MalformedPartitionError`` and no
        partial list is returned (unless the walker was built non-strict).
        """
        return list(self.iter_expired(root))

    def iter_expired(self, root: Union[str, Path]) -> Iterator[Path]:
        found = 0
        for path in self._descend(Path(root), 1, PathContext()):
            found += 1
            logger.debug(f"EXPIRED DIR FOUND -> count: {found} ; dir: {path}")
            yield path

    def _descend(self, path: Path, depth: int, context: PathContext) -> Iterator[Path]:
        if depth > self.layout.depth:
            if self._is_expired(path, context):
                yield path
            return

        role = self.layout.role_at(depth)
        for name in self._list_entries(path):
            if name.startswith("."):
                continue
            if role == TENANT:
                logger.debug(f"=========== Tenant: {name} ===========")
            child = path / name
            logger.debug(str(child))
            yield from self._descend(child, depth + 1, context.bind(role, name))

    @staticmethod
    def _list_entries(path: Path) -> List[str]:
        try:
            return sorted(p.name for p in path.iterdir())
        except OSError as e:
            logger.debug(f"Informational: failed to read dir {path}: {e}")
            return []

    def _is_expired(self, path: Path, context: PathContext) -> bool:
        retention = self.resolver.resolve(context.tenant or "")
        logger.debug(f"Tenant: {context.tenant} ; Date: {context.date_token} ; Retention: {retention}")
        try:
            when = context.partition_date()
        except MalformedPartitionError as e:
            if self.strict_dates:
                logger.error(f"Error parsing directory date at {path}: {e}")
                raise
            logger.warning(f"Skipping {path}: {e}")
            return False
        age = age_in_days(self.reference_time, when)
        logger.debug(f"{path}: age={age}d retention={retention}d")
        return age > retention


def find_expired(root: Union[str, Path], retention: Mapping[str, int],
                 reference_time: Optional[datetime] = None,
                 layout: PartitionLayout = DEFAULT_LAYOUT, strict_dates: bool = True) -> List[Path]:
    """Convenience wrapper: walk ``root`` with a plain tenant -> days mapping."""
    walker = ExpiryWalker(PolicyResolver(retention), reference_time, layout, strict_dates)
    return walker.walk(root)
