import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, Union

from loguru import logger

def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()

def delete_expired(paths: Iterable[Union[str, Path]], dry_run: bool = False) -> Dict[str, Any]:
    """
    Remove expired day subtrees one at a time.

    A failed removal is logged and counted, never raised: the remaining paths
    are still processed. Works with a list or a lazy iterator from the walker.
    """
    stats: Dict[str, Any] = {"expired": 0, "deleted": 0, "failed": 0, "skipped": 0, "failures": {}}
    for raw in paths:
        path = Path(raw)
        stats["expired"] += 1
        if dry_run:
            logger.info(f"DRY RUN: would delete expired dir {path}")
            stats["skipped"] += 1
            continue
        try:
            _remove(path)
        except FileNotFoundError:
            # gone already (concurrent cleanup); nothing left to reclaim
            logger.info(f"Expired dir already removed: {path}")
            stats["deleted"] += 1
            continue
        except OSError as e:
            logger.error(f"Failed to delete dir [{path}] with error {e}")
            stats["failed"] += 1
            stats["failures"][str(path)] = str(e)
            continue
        logger.info(f"DELETED EXPIRED DIR: {path}")
        stats["deleted"] += 1
    return stats
