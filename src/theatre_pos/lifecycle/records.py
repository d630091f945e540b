"""Run records for lifecycle stages.

A small JSON record is stored after each cleanup (the clean log) and after
any failure (the error record) so the outcome of unattended runs can be
inspected later.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from theatre_pos.exceptions import PersistenceError
from theatre_pos.lifecycle.store import KeyValueStore, get_json, set_json

logger = logging.getLogger(__name__)


@dataclass
class RunRecord:
    """Outcome of one lifecycle stage run.

    Attributes:
        stage: "snapshot", "clean" or "load".
        business_date: Business date the run was for (YYYY-MM-DD).
        status: "ok" or "failed".
        last_run: ISO timestamp of when the stage ran.
        detail: Stage-specific values (counts, cutoff date, error message).

    """

    stage: str
    business_date: str
    status: str  # "ok" | "failed"
    last_run: str  # ISO timestamp
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert the record to a dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> RunRecord:
        """Create a record from a dictionary."""
        return cls(**data)


async def write_record(store: KeyValueStore, key: str, record: RunRecord) -> None:
    """Store a run record under ``key``."""
    await set_json(store, key, record.to_dict())
    logger.debug("Wrote %s record for %s under %r", record.stage, record.business_date, key)


async def read_record(store: KeyValueStore, key: str) -> RunRecord | None:
    """Read a run record, None if absent or unreadable.

    Examples:
        >>> record = await read_record(store, "last_auto_clean_log")
        >>> if record and record.status == "ok":
        ...     print(record.detail["cleared_count"])

    """
    try:
        data = await get_json(store, key)
    except PersistenceError as e:
        logger.warning("Error reading run record %r: %s", key, e)
        return None
    if data is None:
        return None
    try:
        return RunRecord.from_dict(data)
    except TypeError as e:
        # A corrupted record is treated as missing
        logger.warning("Run record %r is malformed: %s", key, e)
        return None
