"""Encoded-size arithmetic Walrus uses to price a blob.

Walrus charges per storage unit (1 MiB) of the *encoded* blob: the RS2
erasure coding spreads primary and secondary slivers over every shard and
adds per-shard metadata. These helpers reproduce that arithmetic so a
quote can be computed from the on-chain prices.

Examples:
    >>> encoded_blob_length(1, n_shards=10)
    6940
    >>> storage_units_from_size(6940)
    1
"""

from __future__ import annotations

BYTES_PER_UNIT_SIZE = 1024 * 1024
DIGEST_LEN = 32
BLOB_ID_LEN = 32


def max_faulty_nodes(n_shards: int) -> int:
    """Largest number of Byzantine shards tolerated."""
    return (n_shards - 1) // 3


def decoding_safety_limit(n_shards: int) -> int:
    """Extra symbols withheld from decoding for RS2."""
    return min(max_faulty_nodes(n_shards) // 5, 5)


def source_symbols(n_shards: int) -> tuple[int, int]:
    """Number of primary and secondary source symbols.

    Raises:
        ValueError: If the committee is too small to encode.
    """
    if n_shards < 4:
        raise ValueError(f"n_shards must be at least 4, got {n_shards}")

    faulty = max_faulty_nodes(n_shards)
    safety = decoding_safety_limit(n_shards)
    primary = n_shards - 2 * faulty - safety
    secondary = n_shards - faulty - safety
    return primary, secondary


def metadata_length(n_shards: int) -> int:
    """Size of the blob metadata stored on every shard."""
    return n_shards * DIGEST_LEN * 2 + BLOB_ID_LEN


def encoded_sliver_size(unencoded_length: int, n_shards: int) -> int:
    """Size of the primary plus secondary slivers held by one shard."""
    primary, secondary = source_symbols(n_shards)
    symbol_size = (max(unencoded_length, 1) - 1) // (primary * secondary) + 1
    # RS2 symbols have an even length
    if symbol_size % 2 == 1:
        symbol_size += 1
    return (primary + secondary) * symbol_size


def encoded_blob_length(unencoded_length: int, n_shards: int) -> int:
    """Total encoded length of a blob across all shards.

    Args:
        unencoded_length: Original blob size in bytes.
        n_shards: Number of shards in the current committee.

    Returns:
        Encoded size in bytes.
    """
    if unencoded_length < 0:
        raise ValueError("unencoded_length must not be negative")
    per_shard = encoded_sliver_size(unencoded_length, n_shards) + metadata_length(n_shards)
    return n_shards * per_shard


def storage_units_from_size(size: int) -> int:
    """Number of 1 MiB storage units needed for ``size`` bytes (ceiling)."""
    return -(-size // BYTES_PER_UNIT_SIZE)
