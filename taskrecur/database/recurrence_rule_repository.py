"""Repository for RecurrenceRule database operations."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from taskrecur.database.models import RecurrenceRuleDB
from taskrecur.models.recurrence import RecurrenceRule

logger = logging.getLogger(__name__)


class RecurrenceRuleRepository:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, project_id: str, rule_id: str) -> Optional[RecurrenceRuleDB]:
        return (
            self.db.query(RecurrenceRuleDB)
            .filter(
                RecurrenceRuleDB.project_id == project_id,
                RecurrenceRuleDB.id == rule_id,
                RecurrenceRuleDB.deleted_at.is_(None),
            )
            .first()
        )

    def save(self, project_id: str, rule: RecurrenceRule, user_id: str) -> RecurrenceRule:
        """Create the rule, or overwrite it if a live rule with the same id exists."""
        row = self._row(project_id, rule.id) if rule.id else None
        if row is None:
            if rule.id and self.db.get(RecurrenceRuleDB, rule.id) is not None:
                # Id belongs to a retired rule (or another project); store as a new rule.
                rule = rule.model_copy(update={"id": None})
            row = RecurrenceRuleDB.from_pydantic(rule, project_id=project_id, user_id=user_id)
            self.db.add(row)
        else:
            row.apply(rule, user_id)
            row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Saved recurrence rule {row.id} ({row.unit} x{row.interval})")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save recurrence rule: {type(e).__name__}: {str(e)}")
            raise

    def get(self, project_id: str, rule_id: str) -> Optional[RecurrenceRule]:
        row = self._row(project_id, rule_id)
        return row.to_pydantic() if row else None

    def list_active(self, project_id: str) -> List[RecurrenceRule]:
        rows = (
            self.db.query(RecurrenceRuleDB)
            .filter(
                RecurrenceRuleDB.project_id == project_id,
                RecurrenceRuleDB.deleted_at.is_(None),
            )
            .order_by(RecurrenceRuleDB.created_at.desc())
            .all()
        )
        return [row.to_pydantic() for row in rows]

    def soft_delete(self, project_id: str, rule_id: str, user_id: str) -> bool:
        row = (
            self.db.query(RecurrenceRuleDB)
            .filter(RecurrenceRuleDB.project_id == project_id, RecurrenceRuleDB.id == rule_id)
            .first()
        )
        if row is None or row.deleted_at is not None:
            return False
        row.deleted_at = datetime.utcnow()
        row.updated_by = user_id
        try:
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to soft delete recurrence rule {rule_id}: {type(e).__name__}: {str(e)}")
            raise
