from typing import Callable, Hashable


MASK_64 = 0xFFFF_FFFF_FFFF_FFFF

FNV_OFFSET_BASIS_64 = 0xCBF29CE484222325
FNV_PRIME_64 = 0x100000001B3


# Maps a key to an unsigned 64-bit digest. Must be deterministic for the
# lifetime of the table and must not depend on its capacity.
Hasher = Callable[[Hashable], int]


def builtin_hash(key: Hashable) -> int:
    return hash(key) & MASK_64


def fnv1a_64(key: str | bytes) -> int:
    """FNV-1a over the UTF-8 bytes of a string (or over raw bytes).

    Unlike `builtin_hash`, the digest is the same across interpreter runs.
    """
    if isinstance(key, str):
        data = key.encode("utf-8")
    elif isinstance(key, (bytes, bytearray)):
        data = bytes(key)
    else:
        raise TypeError(f"fnv1a_64 hashes str or bytes, got {type(key).__name__}")

    digest = FNV_OFFSET_BASIS_64
    for byte in data:
        digest ^= byte
        digest = (digest * FNV_PRIME_64) & MASK_64
    return digest
