"""
Partition selection.

All events for one account land on the same partition, which is consumed by a
single worker at a time, so per-account ordering is preserved.

Decision: CRC32 of the canonical UUID string. Python's built-in hash() is
salted per process and would route the same account differently from one
API worker to the next.
"""

import zlib
from uuid import UUID


def partition_for(user_id: UUID, partitions: int) -> int:
    """
    Pick the partition for an account.

    Args:
        user_id: The partition key
        partitions: Number of partitions of the topic

    Returns:
        An index in [0, partitions)
    """
    if partitions < 1:
        raise ValueError(f"Topic must have at least one partition, got {partitions}")
    return zlib.crc32(str(user_id).encode("ascii")) % partitions


def queue_name(topic: str, partition: int) -> str:
    return f"{topic}.{partition}"
