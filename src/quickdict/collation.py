"""
StarDict collation order.

Strings compare by their UTF-8 bytes with ASCII letters folded to lower
case; strings equal under that fold fall back to a raw byte comparison.
A string that is a byte prefix of another sorts first in both passes.
"""


def collation_key(s: str) -> tuple[bytes, bytes]:
    """Sort key giving the two-pass order: folded bytes, then raw bytes."""
    raw = s.encode("utf-8")
    # bytes.lower() only touches A-Z, multi-byte sequences stay as they are
    return raw.lower(), raw


def compare(a: str, b: str) -> int:
    """Return -1, 0 or 1 as a sorts before, with or after b."""
    key_a = collation_key(a)
    key_b = collation_key(b)
    return (key_a > key_b) - (key_a < key_b)
