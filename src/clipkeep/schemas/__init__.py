from clipkeep.schemas.snapshot import (
    SNAPSHOT_VERSION,
    Snapshot,
    SnapshotError,
    SnapshotRecord,
    decode_snapshot,
    encode_snapshot,
)

__all__ = [
    'SNAPSHOT_VERSION',
    'Snapshot',
    'SnapshotError',
    'SnapshotRecord',
    'decode_snapshot',
    'encode_snapshot',
]
