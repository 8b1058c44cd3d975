"""Configuration management for the OrgTree CLI."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import toml
import yaml
from rich.console import Console

console = Console(stderr=True)

DEFAULT_CONFIG = {
    "api_endpoint": "http://localhost:8000",
    "output_format": "table",
    "default_branch": "internal",
    "uid": None,
}


class ConfigManager:
    """Manage CLI configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_path = config_file or self._get_default_config_path()
        self.config: Dict[str, Any] = {}
        self._load_config()
        self._apply_env_overrides()

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        return Path.home() / ".orgtree" / "config.yml"

    def _load_config(self):
        """Load configuration from file, falling back to defaults."""
        self.config = dict(DEFAULT_CONFIG)
        if not self.config_path.exists():
            return

        suffix = self.config_path.suffix.lower()

        try:
            with open(self.config_path, "r") as f:
                if suffix == ".toml":
                    loaded = toml.load(f)
                else:
                    loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError, toml.TomlDecodeError) as e:
            console.print(f"[yellow]Warning: Failed to load config: {e}[/yellow]")
            return

        self.config.update(loaded)

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        env_mapping = {
            "ORGTREE_API_ENDPOINT": "api_endpoint",
            "ORGTREE_UID": "uid",
            "ORGTREE_OUTPUT_FORMAT": "output_format",
            "ORGTREE_DEFAULT_BRANCH": "default_branch",
        }

        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                self.config[config_key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any):
        self.config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self.config.copy()

    def save(self):
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        suffix = self.config_path.suffix.lower()

        with open(self.config_path, "w") as f:
            if suffix == ".toml":
                toml.dump(self.config, f)
            else:
                yaml.safe_dump(self.config, f, default_flow_style=False)

        # readable/writable by owner only
        self.config_path.chmod(0o600)
