# checkpoint_review/config/loader.py
"""
Configuration loading with auto-creation of defaults.

Uses platformdirs for cross-platform config directory management.
Secrets set in the environment win over values from the file.
"""

import logging
import os
from pathlib import Path

import yaml
from platformdirs import user_config_path

from checkpoint_review.errors import ConfigurationError

from .schema import ReviewConfig

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "ANTHROPIC_API_KEY": ("anthropic", "api_key"),
    "GITHUB_TOKEN": ("github", "token"),
}


def get_config_path() -> Path:
    """Get path to config file, ensuring config directory exists."""
    config_dir = user_config_path("checkpoint-review", ensure_exists=True)
    return config_dir / "config.yaml"


def apply_env_overrides(config: ReviewConfig, environ: dict[str, str] | None = None) -> ReviewConfig:
    """Return a copy of config with non-empty environment secrets applied."""
    environ = os.environ if environ is None else environ
    updated = config
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        section_model = getattr(updated, section).model_copy(update={key: value})
        updated = updated.model_copy(update={section: section_model})
        logger.debug(f"Applied {variable} to {section}.{key}")
    return updated


def load_config(config_path: Path | None = None, environ: dict[str, str] | None = None) -> ReviewConfig:
    """
    Load configuration from YAML file.

    If the config file doesn't exist, creates it with defaults (secrets are
    never written). Returns a validated Pydantic model.

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        default_config = ReviewConfig()
        config_dict = default_config.model_dump(mode="json")

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Created default config at {config_path}")
        return apply_env_overrides(default_config, environ)

    try:
        with config_path.open("r") as f:
            config_data = yaml.safe_load(f) or {}
        config = ReviewConfig(**config_data)
    except (yaml.YAMLError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    logger.info(f"Loaded config from {config_path}")
    return apply_env_overrides(config, environ)
