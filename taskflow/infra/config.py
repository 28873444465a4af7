"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (YAML, env vars, defaults)
- Easy to test with different configurations
"""

import os
from pathlib import Path
from typing import Literal, Optional
import yaml

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with multiple sources:
    1. Default values (hardcoded)
    2. YAML config file
    3. Environment variables (highest priority)
    """
    model_config = SettingsConfigDict(
        env_prefix='TASKFLOW_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        validate_assignment=True
    )

    # Application paths
    app_name: str = "TaskFlow"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None
    export_dir: Optional[Path] = None

    # Storage
    storage_backend: Literal["sql", "json"] = "sql"
    database_url: Optional[str] = None
    namespace: str = Field(default="default", min_length=1, description="Task list to open, e.g. one per user")

    # Timer
    tick_interval_ms: int = Field(default=1000, gt=0, description="Interval of the timer tick")

    # Logging
    log_level: str = "INFO"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        self._load_yaml_config(explicit=set(kwargs))

    def _init_paths(self):
        """Initialize default paths based on OS"""
        if self.config_dir is None:
            if os.name == 'nt':  # Windows
                base = Path(os.getenv('APPDATA'))
            else:  # Linux/Mac
                base = Path.home() / '.config'
            self.config_dir = base / self.app_name.lower()

        if self.data_dir is None:
            if os.name == 'nt':  # Windows
                base = Path(os.getenv('APPDATA'))
            else:  # Linux/Mac
                base = Path.home() / '.local' / 'share'
            self.data_dir = base / self.app_name.lower()

        if self.export_dir is None:
            self.export_dir = self.data_dir / 'exports'

        # Create directories if they don't exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _load_yaml_config(self, explicit: set):
        """Load configuration from YAML file. Keyword arguments and env vars win."""
        # First check in workspace config folder
        config_file = Path("config/settings.yaml")
        if not config_file.exists():
            # Then check in user's config directory
            config_file = self.config_dir / "settings.yaml"

        if not config_file.exists():
            return

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        for key, value in config_data.items():
            # Directory layout is resolved before the file can be found
            if key in ('config_dir', 'data_dir') or key not in type(self).model_fields:
                continue
            if key in explicit or f"{self.model_config['env_prefix']}{key}".upper() in os.environ:
                continue
            setattr(self, key, value)

    def save(self):
        """Save the non-path settings to the user's YAML file"""
        config_file = self.config_dir / "settings.yaml"
        data = self.model_dump(mode='json', exclude={'config_dir', 'data_dir', 'export_dir'})
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False)

    def get_db_url(self) -> str:
        """Get database URL, creating default if not set"""
        if self.database_url:
            return self.database_url

        db_path = self.data_dir / 'taskflow.db'
        return f"sqlite:///{db_path}"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from file"""
    global _settings
    _settings = Settings()
    return _settings
