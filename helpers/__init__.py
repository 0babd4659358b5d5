"""
Key Search Helper Modules

This package contains utility functions organized by functionality:
- data_utils: JSON file operations for found keys
- config_utils: Configuration management
"""

from .data_utils import get_data_dir, save_keys_json, load_keys_json, candidate_to_dict
from .config_utils import load_config

__all__ = [
    # Data utilities
    'get_data_dir',
    'save_keys_json',
    'load_keys_json',
    'candidate_to_dict',

    # Config utilities
    'load_config',
]
