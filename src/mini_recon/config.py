"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .models.record import COMPARED_FIELDS, REFERENCE_FIELD
from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CsvInputConfig(BaseModel):
    """Configuration for CSV ingestion."""

    encoding: str = "utf-8-sig"
    delimiter: str = ","


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    csv: CsvInputConfig = Field(default_factory=CsvInputConfig)


class MatchingConfig(BaseModel):
    """Which fields join and which are compared on matched records."""

    reference_field: str = REFERENCE_FIELD
    compared_fields: list[str] = Field(default_factory=lambda: list(COMPARED_FIELDS))


class ExportFilenames(BaseModel):
    """File names for the per-bucket CSV exports."""

    matched: str = "matched.csv"
    only_internal: str = "only_internal.csv"
    only_provider: str = "only_provider.csv"


class ExcelOutputConfig(BaseModel):
    """Configuration for the Excel report."""

    enabled: bool = True
    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    directory: str = "out"
    filenames: ExportFilenames = Field(default_factory=ExportFilenames)
    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "csv": {
                "encoding": "utf-8-sig",
                "delimiter": ",",
            },
        },
        "matching": {
            "reference_field": REFERENCE_FIELD,
            "compared_fields": list(COMPARED_FIELDS),
        },
        "output": {
            "directory": "out",
            "filenames": {
                "matched": "matched.csv",
                "only_internal": "only_internal.csv",
                "only_provider": "only_provider.csv",
            },
            "excel": {
                "enabled": True,
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration root in {config_path} must be a mapping"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Mini Reconciliation Tool configuration
# Generated configuration file - customize as needed
#
# matching.reference_field joins internal and provider rows.
# matching.compared_fields are checked for exact text equality on matched rows.

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
