"""
Content fingerprinting for change detection.

Hashes the exact bytes that will be stored, never provider metadata.
"""

import hashlib

DEFAULT_ALGORITHM = "sha256"

# 128-bit or wider digests only
SUPPORTED_ALGORITHMS = ("md5", "sha1", "sha256", "sha512", "blake2b", "blake2s")


def calculate_content_hash(content: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Calculate a hex digest of ``content``.

    Args:
        content: Exact bytes to fingerprint
        algorithm: hashlib algorithm name (see SUPPORTED_ALGORITHMS)

    Returns:
        Lowercase hex digest

    Raises:
        ValueError: If the algorithm is not supported
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported checksum algorithm '{algorithm}'. Supported: {', '.join(SUPPORTED_ALGORITHMS)}")
    digest = hashlib.new(algorithm)
    digest.update(content)
    return digest.hexdigest()
