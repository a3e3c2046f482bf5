import hashlib

# Bytes of the SHA-256 digest kept in the fingerprint.
DIGEST_BYTES = 8


def rule_version_hash(version: str) -> str:
    """Short, stable fingerprint of a rule-version identifier."""
    return hashlib.sha256(version.encode("utf-8")).digest()[:DIGEST_BYTES].hex()


def matches_rule_version(stored_hash: str, version: str) -> bool:
    return stored_hash == rule_version_hash(version)
