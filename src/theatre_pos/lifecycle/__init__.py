"""Durable snapshots, retention cleanup and their scheduling."""

from theatre_pos.lifecycle.manager import LifecycleResult, ReportLifecycleManager
from theatre_pos.lifecycle.records import RunRecord, read_record, write_record
from theatre_pos.lifecycle.scheduler import DailyReportTask
from theatre_pos.lifecycle.store import (
    DirectoryStore,
    InMemoryStore,
    KeyValueStore,
    OrderRepository,
)

__all__ = [
    "DailyReportTask",
    "DirectoryStore",
    "InMemoryStore",
    "KeyValueStore",
    "LifecycleResult",
    "OrderRepository",
    "ReportLifecycleManager",
    "RunRecord",
    "read_record",
    "write_record",
]
