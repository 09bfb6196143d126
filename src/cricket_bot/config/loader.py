"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import BotConfig


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None) -> BotConfig:
    """
    Load configuration from a YAML file or from the environment.

    With a path, the YAML file is read, ${VAR} references are substituted
    and the result validated. Without one, every value comes from
    environment variables using ``__`` as the nesting delimiter, e.g.
    ``MESSENGER__APP_SECRET``.

    Args:
        path: Path to YAML configuration file, or None for environment only

    Returns:
        Validated BotConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if path is None:
        config = BotConfig()  # type: ignore[call-arg]
        validate_config(config)
        return config

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    yaml_with_env = substitute_env_vars(raw_yaml)
    config_dict = yaml.safe_load(yaml_with_env) or {}

    config = BotConfig.model_validate(config_dict)
    validate_config(config)

    return config


def validate_config(config: BotConfig) -> None:
    """
    Perform additional cross-field validation.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If a static table is missing
    """
    for name, table in (
        ("explainers", config.data.explainers_path),
        ("jokes", config.data.jokes_path),
    ):
        if not table.is_file():
            raise ValueError(f"Static {name} table not found: {table}")
