"""
Configuration dataclass for saving PDFs with an outline.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional, Dict, Any


DEFAULT_PRODUCER = "tocedit"
DEFAULT_CREATOR = "tocedit PDF TOC editor"


@dataclass
class SaveConfig:
    """
    Metadata written into every saved document.
    """
    title: Optional[str] = None
    producer: str = DEFAULT_PRODUCER
    creator: str = DEFAULT_CREATOR

    @classmethod
    def from_file(cls, config_path: str) -> "SaveConfig":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the JSON configuration file

        Returns:
            SaveConfig: Loaded configuration
        """
        with open(config_path, "r") as f:
            config_data = json.load(f)

        return cls(**config_data)

    @classmethod
    def from_env(cls, env_var: str = "TOCEDIT_SAVE_CONFIG") -> "SaveConfig":
        """
        Load configuration from the JSON file named by an environment variable.

        Args:
            env_var: Environment variable containing the path to the config file

        Returns:
            SaveConfig: Loaded configuration, or the defaults if the variable is not set
        """
        config_path = os.environ.get(env_var)
        if not config_path:
            return cls()

        return cls.from_file(config_path)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Dict[str, Any]: Configuration as a dictionary
        """
        config_dict = {
            "producer": self.producer,
            "creator": self.creator,
        }

        if self.title:
            config_dict["title"] = self.title

        return config_dict
