"""FNV-1a 64-bit hash implementation."""

FNV1A_OFFSET: int = 14695981039346656037
FNV1A_PRIME: int = 1099511628211
_MASK64: int = 0xFFFFFFFFFFFFFFFF


def fnv1a_u64(s: str) -> int:
    """Compute FNV-1a 64-bit hash of a string (UTF-8 bytes)."""
    h = FNV1A_OFFSET
    for byte in s.encode("utf-8"):
        h ^= byte
        h = (h * FNV1A_PRIME) & _MASK64
    return h


def bucket_and_sign(token: str, n_buckets: int) -> tuple[int, float]:
    """Map a token to a feature-hashing bucket and a +/-1 sign.

    The low bits pick the bucket; the top bit picks the sign, so
    colliding tokens tend to cancel rather than pile up.
    """
    h = fnv1a_u64(token)
    sign = -1.0 if h >> 63 else 1.0
    return h % n_buckets, sign
