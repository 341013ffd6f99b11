# fscleaner/core/config.py
import json
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator

from fscleaner.core.policy import DEFAULT_POLICY_KEY

class SystemConfig(BaseModel):
    log_level: str = "INFO"
    log_file: Optional[str] = None
    strict_dates: bool = True

# whole days only: "7", true and 2.0 are rejected rather than coerced
RetentionDays = Annotated[StrictInt, Field(ge=0)]

class RetentionConfig(BaseModel):
    retention: Dict[str, RetentionDays]

    @field_validator("retention", mode="before")
    @classmethod
    def _stringify_tenants(cls, v: Any) -> Any:
        # YAML reads unquoted numeric tenant ids (12345) as ints
        if isinstance(v, dict):
            return {str(k): days for k, days in v.items()}
        return v

    @field_validator("retention")
    @classmethod
    def _require_default(cls, v: Dict[str, int]) -> Dict[str, int]:
        if DEFAULT_POLICY_KEY not in v:
            raise ValueError(f"retention must define a '{DEFAULT_POLICY_KEY}' entry")
        return v

class CleanerConfig(RetentionConfig):
    system: SystemConfig = SystemConfig()


def _read_document(path: Path) -> Any:
    text = path.read_text()
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def load_config(file: str = "config.json") -> CleanerConfig:
    """Load the retention policy document and validate it against the Pydantic schema.

    JSON by default; ``.yaml``/``.yml`` files are read with the same schema.
    Any failure is fatal for the run.
    """
    path = Path(file)
    try:
        raw_config = _read_document(path)
    except OSError as e:
        logger.error(f"Failed to read config file {path}: {e}")
        raise SystemExit(f"Exiting: cannot read retention config {path}.") from e
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error(f"Failed to parse config file {path}: {e}")
        raise SystemExit(f"Exiting: cannot parse retention config {path}.") from e

    try:
        validated_config = CleanerConfig.model_validate(raw_config)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise SystemExit("Exiting due to invalid configuration.") from e
    logger.info("Configuration validated successfully.")
    return validated_config
