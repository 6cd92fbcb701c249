"""Services that turn device snapshots into reports and exports."""

from .base import EventHook
from .device_report import (
    MEMBERSHIP_BATCH_SIZE,
    DeviceReport,
    DeviceReportService,
    batched,
)
from .export import ExportFormat, ExportService

__all__ = [
    "EventHook",
    "MEMBERSHIP_BATCH_SIZE",
    "DeviceReport",
    "DeviceReportService",
    "batched",
    "ExportFormat",
    "ExportService",
]
