"""SQLAlchemy database models for taskrecur."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint

from taskrecur.database.database import Base
from taskrecur.models.recurrence import (
    RecurrenceAdjustment,
    RecurrenceDetails,
    RecurrenceRule,
    RecurrenceUnit,
)


def _split_end_date(end_date: Optional[datetime]) -> Tuple[Optional[datetime], Optional[int]]:
    """Split an end date into a naive wall-clock value and its UTC offset in seconds."""
    if end_date is None or end_date.utcoffset() is None:
        return end_date, None
    return end_date.replace(tzinfo=None), int(end_date.utcoffset().total_seconds())


class RecurrenceRuleDB(Base):
    """Database model for RecurrenceRule."""

    __tablename__ = "recurrence_rules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, nullable=False, index=True)

    # Base pattern
    unit = Column(String, nullable=False)
    interval = Column(Integer, nullable=False, default=1)
    days_of_week = Column(JSON, nullable=True)

    # Details and adjustment (stored as JSON documents)
    details = Column(JSON, nullable=True)
    adjustment = Column(JSON, nullable=True)

    # Stop conditions
    end_date = Column(DateTime, nullable=True)  # wall-clock time in the rule's own offset
    end_date_utc_offset_sec = Column(Integer, nullable=True)  # None for naive end dates
    max_occurrences = Column(Integer, nullable=True)

    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    def _end_date(self) -> Optional[datetime]:
        if self.end_date is None or self.end_date_utc_offset_sec is None:
            return self.end_date
        return self.end_date.replace(tzinfo=timezone(timedelta(seconds=self.end_date_utc_offset_sec)))

    def to_pydantic(self) -> RecurrenceRule:
        """Convert database model to Pydantic model."""
        return RecurrenceRule(
            id=self.id,
            unit=RecurrenceUnit(self.unit),
            interval=self.interval,
            days_of_week=self.days_of_week,
            details=RecurrenceDetails.model_validate(self.details) if self.details else None,
            adjustment=RecurrenceAdjustment.model_validate(self.adjustment) if self.adjustment else None,
            end_date=self._end_date(),
            max_occurrences=self.max_occurrences,
        )

    def apply(self, rule: RecurrenceRule, user_id: str) -> None:
        """Copy rule fields onto this row."""
        self.unit = rule.unit.value
        self.interval = int(rule.interval)
        self.days_of_week = [d.value for d in rule.days_of_week] if rule.days_of_week is not None else None
        self.details = rule.details.model_dump(mode="json") if rule.details else None
        self.adjustment = rule.adjustment.model_dump(mode="json") if rule.adjustment else None
        self.end_date, self.end_date_utc_offset_sec = _split_end_date(rule.end_date)
        self.max_occurrences = rule.max_occurrences
        self.updated_by = user_id

    @classmethod
    def from_pydantic(cls, rule: RecurrenceRule, *, project_id: str, user_id: str):
        """Create database model from Pydantic model."""
        row = cls(id=rule.id or str(uuid.uuid4()), project_id=project_id)
        row.apply(rule, user_id)
        return row


class ItemRecurrenceDB(Base):
    """Association of a recurrence rule with a task or sub-task."""

    __tablename__ = "item_recurrences"
    __table_args__ = (
        # One rule per task / sub-task.
        UniqueConstraint("project_id", "item_id", "is_subtask", name="uq_item_recurrence"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, nullable=False, index=True)
    item_id = Column(String, nullable=False, index=True)
    is_subtask = Column(Boolean, nullable=False, default=False)

    recurrence_rule_id = Column(
        String, ForeignKey("recurrence_rules.id", ondelete="CASCADE"), nullable=False, index=True
    )

    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
