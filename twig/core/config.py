"""Configuration management for Twig.

Values are read from, in order of precedence:
environment variables, the repository config, the global config.
"""

import os
import getpass
import configparser
from pathlib import Path
from typing import Optional, List


class Config:
    """
    Manages Twig configuration files.

    Configuration is stored in INI format:
    - Global config: ~/.twigconfig
    - Repository config: .twig/config

    Repository config takes precedence over global config.
    Environment variables (TWIG_<SECTION>_<KEY>) take highest precedence.
    """

    GLOBAL_CONFIG_PATH = Path.home() / '.twigconfig'

    def __init__(self, repo_config_path: Optional[Path] = None,
                 global_config_path: Optional[Path] = None):
        """
        Initialize Config manager.

        Args:
            repo_config_path: Path to repository config file, if in a repo
            global_config_path: Override for the global config location
        """
        self.repo_config_path = repo_config_path
        self.global_config_path = global_config_path or self.GLOBAL_CONFIG_PATH
        self._global_config = None
        self._repo_config = None

    @property
    def global_config(self) -> configparser.ConfigParser:
        """Load and return global configuration."""
        if self._global_config is None:
            self._global_config = configparser.ConfigParser()
            if self.global_config_path.exists():
                self._global_config.read(self.global_config_path)
        return self._global_config

    @property
    def repo_config(self) -> Optional[configparser.ConfigParser]:
        """Load and return repository configuration."""
        if self._repo_config is None and self.repo_config_path:
            self._repo_config = configparser.ConfigParser()
            if self.repo_config_path.exists():
                self._repo_config.read(self.repo_config_path)
        return self._repo_config

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Priority order (highest to lowest):
        1. Environment variables (TWIG_<SECTION>_<KEY>)
        2. Repository config
        3. Global config
        4. Fallback value

        Args:
            section: Config section (e.g., 'user', 'core')
            key: Config key (e.g., 'name', 'defaultbranch')
            fallback: Default value if not found

        Returns:
            Configuration value or fallback
        """
        env_value = os.environ.get(f"TWIG_{section.upper()}_{key.upper()}")
        if env_value is not None:
            return env_value

        if self.repo_config and self.repo_config.has_option(section, key):
            return self.repo_config.get(section, key)

        if self.global_config.has_option(section, key):
            return self.global_config.get(section, key)

        return fallback

    def get_list(self, section: str, key: str) -> List[str]:
        """Get a comma-separated value as a list of stripped, non-empty items."""
        value = self.get(section, key)
        if not value:
            return []
        return [item.strip() for item in value.split(',') if item.strip()]

    def set(self, section: str, key: str, value: str, global_config: bool = False) -> None:
        """
        Set a configuration value.

        Args:
            section: Config section
            key: Config key
            value: Value to set
            global_config: If True, write to global config; otherwise repo config
        """
        if global_config:
            config = self.global_config
            config_path = self.global_config_path
        else:
            if not self.repo_config_path:
                raise ValueError("No repository config path available")
            config = self.repo_config
            config_path = self.repo_config_path

        if not config.has_section(section):
            config.add_section(section)

        config.set(section, key, value)

        with open(config_path, 'w') as f:
            config.write(f)

    def get_author(self) -> str:
        """
        Get the author string for new commits.

        Uses user.name and user.email when configured, rendered as
        "Name <email>". Falls back to the login name of the current user.
        """
        name = self.get('user', 'name')
        email = self.get('user', 'email')

        if not name:
            try:
                name = getpass.getuser()
            except (KeyError, OSError):
                name = 'unknown'

        if email:
            return f"{name} <{email}>"
        return name

