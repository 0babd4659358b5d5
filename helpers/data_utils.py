"""
Data utilities for saving and loading found keys as JSON.
"""

import json
import os
import logging
from datetime import datetime

from genkeys.errors import GenkeysError
from genkeys.keys import from_hex, keypair_from_secret
from genkeys.scoring import Candidate

logger = logging.getLogger(__name__)


def get_data_dir(data_dir=None):
    if data_dir:
        data_dir = os.path.abspath(data_dir)
    else:
        data_dir = os.path.abspath(os.getcwd())

    # Ensure data directory exists
    os.makedirs(data_dir, exist_ok=True)
    return data_dir


def candidate_to_dict(candidate: Candidate):
    """Serialize a candidate using Yggdrasil's config key names"""
    return {
        "PublicKey": candidate.keys.public_hex,
        "PrivateKey": candidate.keys.secret_hex,
        "Seed": candidate.keys.seed_hex,
        "Address": candidate.address_str,
        "LeadingZeroBits": candidate.zero_bits,
        "ZeroBlocks": candidate.zero_blocks,
    }


def save_keys_json(candidate: Candidate, data_dir=None):
    """Save a found key to ygg_<first 8 hex>.json with timestamp

    Returns:
        str: Path of the written file
    """
    data_dir = get_data_dir(data_dir)
    key_id = candidate.keys.public_hex[:8]
    filepath = os.path.join(data_dir, f"ygg_{key_id}.json")

    data_with_timestamp = {
        "timestamp": datetime.now().isoformat(),
        "data": candidate_to_dict(candidate)
    }

    with open(filepath, 'w') as f:
        json.dump(data_with_timestamp, f, indent=2)

    logger.info(f"Key saved to {filepath}")
    return filepath


def load_keys_json(filepath):
    """Load a saved key and re-derive it from its private key

    Returns:
        Candidate: The rebuilt candidate, or None if the file is missing or invalid
    """
    if not os.path.exists(filepath):
        logger.warning(f"No key file found: {filepath}")
        return None

    try:
        with open(filepath, 'r') as f:
            loaded_data = json.load(f)

        data = loaded_data.get("data", {})
        keys = keypair_from_secret(data["PrivateKey"])
        if keys.public_key != from_hex(data["PublicKey"]):
            logger.error(f"Public key in {filepath} does not match its private key")
            return None
        return Candidate.from_keys(keys)
    except (json.JSONDecodeError, KeyError, ValueError, GenkeysError) as e:
        logger.error(f"Error loading key from JSON: {str(e)}")
        return None
