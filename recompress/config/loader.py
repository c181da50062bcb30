import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import ValidationError
from recompress.config.models import JobConfiguration
from recompress.domain.errors import ConfigurationError

# How each setting is spelled on the command line, for error messages.
CLI_NAMES = {
    "quality": "-q/--quality",
    "speed": "-s/--speed",
    "max_width": "-x/--width",
    "max_height": "-y/--height",
    "timeout_seconds": "--timeout",
}

def default_config_path() -> Path:
    return Path.home() / ".config" / "recompress" / "recompress.yaml"

def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the ``general`` section of a YAML config file.

    Without an explicit path the per-user file is read if it exists. An
    explicit path that does not exist is an error.
    """
    explicit = config_path is not None
    path = Path(config_path).expanduser() if explicit else default_config_path()

    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    general = data.get('general') or {}
    if not isinstance(general, dict):
        raise ConfigurationError(f"'general' in {path} must be a mapping")

    unknown = sorted(set(general) - set(JobConfiguration.model_fields))
    if unknown:
        raise ConfigurationError(f"Unknown setting(s) in {path}: {', '.join(unknown)}")
    return general

def describe_validation_error(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        field = str(err['loc'][0]) if err['loc'] else "config"
        name = CLI_NAMES.get(field, field)
        messages.append(f"{name}: {err['msg']}")
    return "; ".join(messages)

def build_configuration(
    file_values: Dict[str, Any],
    overrides: Dict[str, Any],
    cpu_count: Optional[int] = None
) -> JobConfiguration:
    """Defaults < config file < command line. ``None`` overrides are ignored."""
    values = dict(file_values)
    values.update({k: v for k, v in overrides.items() if v is not None})
    if cpu_count is not None:
        values['cpu_count'] = cpu_count

    try:
        return JobConfiguration(**values)
    except ValidationError as e:
        raise ConfigurationError(describe_validation_error(e)) from e
