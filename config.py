"""
Configuration Management

Handles loading configuration from environment variables and config files.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from miracast.receiver import ReceiverConfig


@dataclass
class Config:
    """
    Miracast receiver configuration.

    Configuration priority (highest to lowest):
    1. Environment variables (MIRACAST_*)
    2. Config file (config.json)
    3. Default values
    """
    # ARP polling
    arp_table_path: str = '/proc/net/arp'
    poll_interval: float = 1.0  # seconds
    initial_delay: float = 0.01  # seconds
    max_retries: int = 60

    # Wi-Fi Display
    default_control_port: int = 7236

    # Logging
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        config = cls()

        config.arp_table_path = os.getenv('MIRACAST_ARP_TABLE', config.arp_table_path)
        config.poll_interval = float(os.getenv('MIRACAST_POLL_INTERVAL', config.poll_interval))
        config.initial_delay = float(os.getenv('MIRACAST_INITIAL_DELAY', config.initial_delay))
        config.max_retries = int(os.getenv('MIRACAST_MAX_RETRIES', config.max_retries))
        config.default_control_port = int(
            os.getenv('MIRACAST_DEFAULT_PORT', config.default_control_port)
        )
        config.log_level = os.getenv('MIRACAST_LOG_LEVEL', config.log_level)

        return config

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from a JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()

        config.arp_table_path = data.get('arp_table_path', config.arp_table_path)
        config.poll_interval = data.get('poll_interval', config.poll_interval)
        config.initial_delay = data.get('initial_delay', config.initial_delay)
        config.max_retries = data.get('max_retries', config.max_retries)
        config.default_control_port = data.get(
            'default_control_port', config.default_control_port
        )
        config.log_level = data.get('log_level', config.log_level)

        return config

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'arp_table_path': self.arp_table_path,
            'poll_interval': self.poll_interval,
            'initial_delay': self.initial_delay,
            'max_retries': self.max_retries,
            'default_control_port': self.default_control_port,
            'log_level': self.log_level,
        }

    def save(self, path: Path):
        """Save configuration to a JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_receiver_config(self) -> ReceiverConfig:
        """Build the receiver's own config from these settings."""
        return ReceiverConfig(
            arp_table_path=self.arp_table_path,
            poll_interval=self.poll_interval,
            initial_delay=self.initial_delay,
            max_retries=self.max_retries,
            default_control_port=self.default_control_port,
        )


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment.

    Environment variables override file settings.
    """
    # Start with defaults
    config = Config()

    # Load from file if provided
    if config_path and config_path.exists():
        config = Config.from_file(config_path)

    # Override with environment variables
    env_config = Config.from_env()

    # Merge (env takes precedence for non-default values)
    defaults = Config()
    for key in config.to_dict():
        env_val = getattr(env_config, key)
        if env_val != getattr(defaults, key):
            setattr(config, key, env_val)

    return config


# Example config file template
EXAMPLE_CONFIG = """
{
  "arp_table_path": "/proc/net/arp",
  "poll_interval": 1.0,
  "initial_delay": 0.01,
  "max_retries": 60,
  "default_control_port": 7236,
  "log_level": "INFO"
}
"""


if __name__ == "__main__":
    # Print example config
    print("Example configuration file (config.json):")
    print(EXAMPLE_CONFIG)
