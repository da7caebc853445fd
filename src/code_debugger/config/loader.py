"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import DebuggerConfig

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} and ${VAR_NAME:-default} patterns with environment values.

    Lines that are YAML comments are left untouched.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found and
            no default is given
    """

    def replacer(match: re.Match[str]) -> str:
        var_name, default = match.group(1), match.group(2)
        value = os.environ.get(var_name)
        if value is None:
            if default is None:
                raise ValueError(f"Environment variable {var_name} not found")
            return default
        return value

    # Full-line comments may document the syntax itself
    return "".join(
        line if line.lstrip().startswith("#") else ENV_VAR_PATTERN.sub(replacer, line)
        for line in text.splitlines(keepends=True)
    )


def load_config(path: Path | None = None) -> DebuggerConfig:
    """
    Load configuration from a YAML file, or from the environment alone.

    Args:
        path: Path to YAML configuration file. None builds the configuration
            from defaults, CODE_DEBUGGER_* variables and .env.

    Returns:
        Validated DebuggerConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if path is None:
        return DebuggerConfig()

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    yaml_with_env = substitute_env_vars(raw_yaml)
    config_dict = yaml.safe_load(yaml_with_env) or {}

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    return DebuggerConfig.model_validate(config_dict)
