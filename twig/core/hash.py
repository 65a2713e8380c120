"""Hash utilities for Twig."""

import hashlib


def hash_object(data: bytes) -> str:
    """
    Compute SHA-1 hash of data.
    
    Args:
        data: Bytes to hash
        
    Returns:
        40-character hex string
    """
    return hashlib.sha1(data).hexdigest()


def is_digest(value: str) -> bool:
    """Check whether value looks like a full 40-character hex digest."""
    return len(value) == 40 and all(c in '0123456789abcdef' for c in value)
