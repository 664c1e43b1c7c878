"""
load the transfer defaults from config.yaml and CURLAGENT_* environment variables
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    'CURLAGENT_USER_AGENT': ('agent', 'user_agent'),
    'CURLAGENT_FOLLOW_LOCATION': ('agent', 'follow_location'),
    'CURLAGENT_MAX_REDIRECTS': ('agent', 'max_redirects'),
    'CURLAGENT_ENABLE_COOKIES': ('agent', 'enable_cookies'),
    'CURLAGENT_CONNECT_TIMEOUT': ('agent', 'connect_timeout'),
    'CURLAGENT_TIMEOUT': ('agent', 'timeout'),
    'CURLAGENT_ENGINE': ('agent', 'engine'),
    'CURLAGENT_LOG_LEVEL': ('logging', 'level'),
}


def _env_value(raw: str):
    """Booleans and numbers are read as YAML scalars; anything else stays a string."""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return value if isinstance(value, (bool, int, float)) else raw


class Config:
    """Sections of config.yaml with environment overrides applied."""

    def __init__(self, config_path: str = None):
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"
        self.config_path = Path(config_path)

        try:
            with open(self.config_path, 'r') as f:
                self._config: Dict[str, Any] = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        for env_var, (section, key) in ENV_OVERRIDES.items():
            raw = os.getenv(env_var)
            if raw is not None:
                self._config.setdefault(section, {})[key] = _env_value(raw)

    @property
    def agent(self) -> Dict[str, Any]:
        """Transfer defaults applied to every new agent."""
        return self._config.get('agent') or {}

    @property
    def logging(self) -> Dict[str, Any]:
        return self._config.get('logging') or {}


# Global configuration instance
config = Config()
