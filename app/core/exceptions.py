"""Exception hierarchy for the analytics service.

Error codes follow [CATEGORY][NUMBER]:
- SNP: snapshot errors
- RPT: report lookup errors
"""
from __future__ import annotations

from typing import Any


class InventoryAnalyticsError(Exception):
    """Base for errors surfaced to API callers."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


class MalformedSnapshot(InventoryAnalyticsError):
    """A supplier or product record is missing a required field, carries an
    invalid value, or repeats an identifier.

    Raised before any report is computed, so callers never see a partial report.
    """

    def __init__(
        self,
        record_type: str,
        index: int,
        record_id: Any = None,
        fields: list[str] | None = None,
        reason: str = "invalid or missing fields",
    ):
        fields = fields or []
        label = f"{record_type} #{index}"
        if record_id is not None:
            label += f" (id={record_id})"
        message = f"Malformed {label}: {reason}"
        if fields:
            message += f": {', '.join(fields)}"
        super().__init__(
            message=message,
            code="SNP001",
            status_code=422,
            details={
                "record_type": record_type,
                "index": index,
                "record_id": record_id,
                "fields": fields,
            },
        )
        self.record_type = record_type
        self.index = index
        self.record_id = record_id
        self.fields = fields


class UnknownReport(InventoryAnalyticsError):
    def __init__(self, name: str):
        super().__init__(
            message=f"Report {name} not found",
            code="RPT001",
            status_code=404,
            details={"report": name},
        )
