"""Batch configuration loaded from a JSON configuration file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from acd_batch.errors import ConfigError

DEFAULT_EXTEND_ANNOTATIONS: tuple[str, ...] = (
    "SymptomDiseaseInd",
    "ProcedureInd",
    "MedicationInd",
)


class BatchConfig(BaseModel):
    """Configuration for one batch run.

    Keys in the JSON file use camelCase (``dataDir``, ``extendWordsBy``);
    snake_case field names are accepted as well.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Directories
    data_dir: Path = Path("data")
    output_dir: Path = Path("output")
    recurse: bool = False

    # Service connection
    url: str = ""
    authorization: str = ""
    annotator_config: Path | None = None
    max_attempts: int = Field(default=2, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    timeout_seconds: float = Field(default=60.0, gt=0.0)
    verify_tls: bool = False

    # Span extension
    extend_words_by: int = Field(default=5, ge=0)
    extend_annotations: tuple[str, ...] = DEFAULT_EXTEND_ANNOTATIONS

    print_errors: bool = False

    @field_validator("data_dir", "output_dir", "annotator_config", mode="after")
    @classmethod
    def _expand_home(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        return value.expanduser()

    def with_overrides(self, **values: Any) -> BatchConfig:
        """Return a copy with the non-None values applied."""
        update = {key: value for key, value in values.items() if value is not None}
        if not update:
            return self
        # Re-validate so overrides get the same path expansion and bounds checks
        data = self.model_dump()
        data.update(update)
        return BatchConfig(**data)


def load_config(path: Path) -> BatchConfig:
    """Load a BatchConfig from a JSON file.

    Relative directory and template paths are resolved against the directory
    holding the configuration file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        Validated, immutable BatchConfig

    Raises:
        ConfigError: If the file is missing, not valid JSON, or fails validation
    """
    data = _read_json_object(path, "configuration")
    try:
        config = BatchConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    base = path.resolve().parent
    resolved: dict[str, Path] = {}
    for name in ("data_dir", "output_dir", "annotator_config"):
        value: Path | None = getattr(config, name)
        if value is not None and not value.is_absolute():
            resolved[name] = base / value
    return config.model_copy(update=resolved) if resolved else config


def load_annotator_config(path: Path | None) -> dict[str, Any]:
    """Load the annotator request template.

    Args:
        path: Template JSON file, or None for an empty template

    Returns:
        The parsed template; copied per request by the client, never mutated

    Raises:
        ConfigError: If the file is missing or does not hold a JSON object
    """
    if path is None:
        return {}
    return _read_json_object(path, "annotator configuration")


def _read_json_object(path: Path, what: str) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"{what.capitalize()} file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {what} file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {what} file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{what.capitalize()} file {path} must hold a JSON object")
    return data
