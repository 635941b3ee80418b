"""Rejection reasons and user-facing messages for table and seat operations."""
from __future__ import annotations

from enum import Enum


class RejectReason(str, Enum):
    TABLE_NOT_FOUND = "table_not_found"
    INVALID_SEAT = "invalid_seat"
    TABLE_NOT_RUNNING = "table_not_running"
    TABLE_HAS_ACTIVE_PLAYERS = "table_has_active_players"
    MEMBER_ID_REQUIRED = "member_id_required"
    SEAT_OCCUPIED = "seat_occupied"
    DUPLICATE_MEMBER = "duplicate_member"
    NOTHING_SELECTED = "nothing_selected"
    BATCH_MISSING_MEMBER = "batch_missing_member"
    INVALID_NUMBER = "invalid_number"


class ErrorMessages:
    TABLE_NOT_FOUND = "Table not found"
    INVALID_SEAT = "Invalid seat"
    TABLE_NOT_RUNNING = "Please start the table clock before seating players."
    TABLE_HAS_ACTIVE_PLAYERS = "There are still players seated (not resting). Please let them leave first."
    MEMBER_ID_REQUIRED = "Please enter a member ID before seating."
    SEAT_OCCUPIED = "Seat is occupied; the member ID can only change once the seat is idle."
    DUPLICATE_MEMBER = "This member is already seated at another position. Please handle seat move first."
    NOTHING_SELECTED = "Please select seats for batch operation first."
    BATCH_MISSING_MEMBER = "Every batch seat must have a member ID."
    INVALID_NUMBER = "Please enter a valid number."
    INVALID_EXPORT_FORMAT = "Invalid export format (expected csv, tsv or xlsx)"

    @classmethod
    def for_reason(cls, reason: RejectReason) -> str:
        return getattr(cls, reason.name)


class TableRuleError(ValueError):
    """A table or seat operation was rejected; the state it was applied to is unchanged."""

    def __init__(self, reason: RejectReason, message: str | None = None):
        self.reason = reason
        self.message = message or ErrorMessages.for_reason(reason)
        super().__init__(self.message)
