"""
Configuration utilities for managing config.ini files.
"""

import configparser
import logging
import os
import sys

logger = logging.getLogger(__name__)


def load_config(config_file="config.ini"):
    """
    Load configuration from config.ini file

    A missing file is not an error: the returned parser is simply empty and
    every setting falls back to its default.

    Args:
        config_file (str): Path to the configuration file

    Returns:
        configparser.ConfigParser: Loaded configuration object

    Raises:
        SystemExit: If the configuration file exists but cannot be parsed
    """
    config = configparser.ConfigParser()
    if not os.path.exists(config_file):
        logger.debug(f"Configuration file {config_file} not found, using defaults")
        return config

    try:
        config.read(config_file)
        logger.info("Configuration loaded successfully")
        return config
    except configparser.Error as e:
        logger.error(f"Failed to load configuration: {str(e)}")
        sys.exit(1)
