"""
Configuration dataclass for AI-assisted TOC extraction.
"""

import json
import os
from dataclasses import dataclass
from typing import Optional, Dict, Any


DEFAULT_MODEL = "mistral-small-latest"


@dataclass
class AiExtractionConfig:
    """
    Configuration for the AI TOC extractor.
    """
    api_key: str = ''
    model: str = DEFAULT_MODEL
    temperature: float = 0.3
    max_tokens: int = 2000
    max_chars: int = 5000

    @classmethod
    def from_file(cls, config_path: str) -> "AiExtractionConfig":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the JSON configuration file

        Returns:
            AiExtractionConfig: Loaded configuration
        """
        with open(config_path, "r") as f:
            config_data = json.load(f)

        return cls(**config_data)

    @classmethod
    def from_env(cls, api_key_var: str = "MISTRAL_API_KEY", **overrides: Any) -> "AiExtractionConfig":
        """
        Build a configuration with the API key read from the environment.

        Args:
            api_key_var: Environment variable holding the API key
            **overrides: Other configuration fields

        Returns:
            AiExtractionConfig: Configuration (api_key is empty if the variable is unset)
        """
        return cls(api_key=os.environ.get(api_key_var, ""), **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary, without the API key.

        Returns:
            Dict[str, Any]: Configuration as a dictionary
        """
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "max_chars": self.max_chars,
        }
