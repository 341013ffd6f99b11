# fscleaner/cli.py — retention cleanup for date partitioned data directories
from __future__ import annotations
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from loguru import logger

from fscleaner.core.config import CleanerConfig, load_config
from fscleaner.core.policy import PolicyResolver
from fscleaner.data.layout import MalformedPartitionError
from fscleaner.data.maintenance import delete_expired
from fscleaner.data.walker import ExpiryWalker

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_DATA_DIR = "/data"

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

# --------------------------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------------------------

def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Replace loguru sinks: coloured stderr plus an optional rotating file."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        logger.add(
            log_file,
            level=level.upper(),
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
            format="{time} {level} {message}",
        )

def _effective_level(cfg: Optional[CleanerConfig], verbose: bool) -> str:
    if verbose:
        return "DEBUG"
    return cfg.system.log_level if cfg else "INFO"

# --------------------------------------------------------------------------------------
# CLI Root
# --------------------------------------------------------------------------------------

@click.group()
def cli() -> None:
    """Root CLI group."""
    load_dotenv()

config_option = click.option(
    "--retention-config-file-name", "config_file",
    default=DEFAULT_CONFIG_FILE, show_default=True, envvar="FSCLEANER_RETENTION_CONFIG",
    help="Config file holding tenant retention in days, eg, config.json",
)

@cli.command()
@config_option
@click.option("--top-level-data-dir-name", "data_dir", default=DEFAULT_DATA_DIR, show_default=True,
              envvar="FSCLEANER_DATA_DIR", help="Top level directory where partitioned data is located, eg, /data")
@click.option("--enable-verbose-logging", "verbose", is_flag=True, help="Enable verbose logging for debugging")
@click.option("--dry-run", is_flag=True, help="Report expired directories without deleting them.")
@click.option("--reference-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Evaluate ages against this date (midnight UTC) instead of now.")
@click.option("--skip-malformed", is_flag=True,
              help="Log and skip directories whose names are not a valid date instead of aborting.")
@click.option("--log-file", default=None, help="Also write logs to this rotating file.")
def clean(config_file: str, data_dir: str, verbose: bool, dry_run: bool,
          reference_date: Optional[datetime], skip_malformed: bool, log_file: Optional[str]) -> None:
    """Delete day directories that are past their tenant's retention."""
    configure_logging(_effective_level(None, verbose))
    logger.info(f"Command line flags => config_file: {config_file} ; data_dir: {data_dir} ; "
                f"verbose: {verbose} ; dry_run: {dry_run} ; skip_malformed: {skip_malformed}")

    cfg = load_config(config_file)
    configure_logging(_effective_level(cfg, verbose), log_file or cfg.system.log_file)

    resolver = PolicyResolver(cfg.retention)
    logger.info(f"Retention config: {json.dumps(resolver.as_dict(), sort_keys=True)}")

    reference_time = reference_date.replace(tzinfo=timezone.utc) if reference_date else None
    walker = ExpiryWalker(resolver, reference_time, strict_dates=cfg.system.strict_dates and not skip_malformed)
    logger.info(f"Reference time: {walker.reference_time.isoformat()}")

    try:
        expired = walker.walk(data_dir)
    except MalformedPartitionError as e:
        logger.error(f"Aborting cleanup, nothing deleted: {e}")
        raise SystemExit(f"Exiting: malformed partition directory ({e}).") from e

    logger.info(f"Number of expired directories up for deletion: {len(expired)}")
    stats = delete_expired(expired, dry_run=dry_run)
    if stats["failed"]:
        logger.warning(f"{stats['failed']} expired directories could not be deleted")
    click.echo(json.dumps(stats, indent=2, sort_keys=True))

@cli.command()
@config_option
def check_config(config_file: str) -> None:
    """Validate the retention config and print the resolved policy."""
    configure_logging("INFO")
    cfg = load_config(config_file)
    click.echo(json.dumps(cfg.model_dump(), indent=2, sort_keys=True))


if __name__ == "__main__":
    cli()
