"""
API Key Generator
=================

Makes the random keys we hand out to devices.

Keys are hex strings from the OS random source (secrets module).
16 bytes = 128 bits = 32 hex characters, which is plenty: nobody is
guessing one, and two devices will never get the same key.
"""

import secrets

# Number of random bytes in a key (hex string is twice as long)
API_KEY_BYTES = 16

# Anything shorter than this is guessable
MIN_API_KEY_BYTES = 16


def generate_api_key(num_bytes: int = API_KEY_BYTES) -> str:
    """
    Generate a random API key as a hexadecimal string.

    Args:
        num_bytes: How many random bytes to use (at least 16)

    Returns:
        Hex string of length 2 * num_bytes

    Raises:
        ValueError: If num_bytes is below 16
    """
    if num_bytes < MIN_API_KEY_BYTES:
        raise ValueError(
            f"API keys need at least {MIN_API_KEY_BYTES} random bytes, got {num_bytes}"
        )
    return secrets.token_hex(num_bytes)
