"""
Module: aspect_gen.config
Purpose: Configuration management for AspectRatioAI
Dependencies: pyyaml, python-dotenv, pathlib
"""

from pathlib import Path
from typing import Dict, Any, List, Optional
import yaml
import os

from dotenv import load_dotenv

load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Directory paths
DOWNLOADS_DIR = PROJECT_ROOT / "downloads"
CONFIG_DIR = PROJECT_ROOT / "config"

CONFIG_ENV_VAR = "ASPECT_GEN_CONFIG"

RECOMPOSE_PROMPT = (
    "Recreate this image in high fidelity, adapting the composition to fit the new "
    "aspect ratio while preserving the original subject, style, and lighting."
)


class Config:
    """
    Configuration manager for AspectRatioAI.

    Handles generation model settings, credential lookup, API server
    configuration and download output.

    Attributes:
        generation (Dict[str, Any]): Model, instruction and ratio defaults
        credentials (Dict[str, Any]): Environment variables searched for the API key
        api (Dict[str, Any]): API server configuration
        output (Dict[str, Any]): Download file configuration

    Example:
        >>> config = Config()
        >>> config.get_model_id()
        'gemini-2.5-flash-image'
        >>> config.generation["default_ratio"]
        '9:16'
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration with default values and optional overrides.

        Args:
            config_file: Optional path to YAML config file for overrides
        """
        self.generation: Dict[str, Any] = {
            "model_id": "gemini-2.5-flash-image",
            "prompt": RECOMPOSE_PROMPT,
            "default_ratio": "9:16",
            "result_media_type": "image/png",
            "timeout_ms": None,  # No client-side timeout
        }

        self.credentials: Dict[str, Any] = {
            "env_vars": ["API_KEY", "GEMINI_API_KEY"],
        }

        self.api: Dict[str, Any] = {
            "host": "0.0.0.0",
            "port": 8000,
            "reload": False,
            "log_level": "info",
        }

        self.output: Dict[str, Any] = {
            "directory": str(DOWNLOADS_DIR),
            "naming_pattern": "image-{view}-{timestamp}.png",
        }

        if config_file and config_file.exists():
            self._load_overrides(config_file)

    def _load_overrides(self, config_file: Path) -> None:
        """
        Load configuration overrides from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, 'r') as f:
            overrides = yaml.safe_load(f)

        if overrides:
            # Section dicts are merged, scalars replaced
            for key, value in overrides.items():
                if hasattr(self, key) and isinstance(getattr(self, key), dict):
                    getattr(self, key).update(value)
                else:
                    setattr(self, key, value)

    def get_model_id(self) -> str:
        """Gemini model used for re-composition."""
        return self.generation["model_id"]

    def get_section(self, name: str) -> Dict[str, Any]:
        """
        Get a copy of one configuration section.

        Args:
            name: Section name (generation, credentials, api, output)

        Raises:
            KeyError: If the section is not recognized
        """
        sections = ("generation", "credentials", "api", "output")
        if name not in sections:
            raise KeyError(f"Unknown config section: {name}. Available: {list(sections)}")
        return dict(getattr(self, name))

    def get_api_key(self) -> Optional[str]:
        """
        Look up the generation service credential in the environment.

        Returns:
            First non-empty value among credentials.env_vars, or None
        """
        env_vars: List[str] = self.credentials.get("env_vars", [])
        for name in env_vars:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return None


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Get global configuration instance (singleton pattern).

    The override file is taken from $ASPECT_GEN_CONFIG when set, otherwise
    from config/local.yaml under the project root.

    Example:
        >>> from aspect_gen.config import get_config
        >>> print(get_config().get_model_id())
    """
    global _config_instance
    if _config_instance is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        local_config = Path(env_path) if env_path else CONFIG_DIR / "local.yaml"
        _config_instance = Config(local_config if local_config.exists() else None)
    return _config_instance


def reset_config() -> None:
    """Drop the cached instance so the next get_config() re-reads overrides."""
    global _config_instance
    _config_instance = None
