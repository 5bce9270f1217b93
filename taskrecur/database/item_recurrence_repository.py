"""Repository associating recurrence rules with tasks and sub-tasks."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from taskrecur.database.models import ItemRecurrenceDB
from taskrecur.database.recurrence_rule_repository import RecurrenceRuleRepository
from taskrecur.models.recurrence import RecurrenceRule

logger = logging.getLogger(__name__)


class ItemRecurrenceRepository:
    def __init__(self, db: Session):
        self.db = db
        self.rules = RecurrenceRuleRepository(db)

    def _link(self, project_id: str, item_id: str, is_subtask: bool) -> Optional[ItemRecurrenceDB]:
        return (
            self.db.query(ItemRecurrenceDB)
            .filter(
                ItemRecurrenceDB.project_id == project_id,
                ItemRecurrenceDB.item_id == item_id,
                ItemRecurrenceDB.is_subtask == is_subtask,
            )
            .first()
        )

    def get_rule(self, project_id: str, item_id: str, is_subtask: bool) -> Optional[RecurrenceRule]:
        link = self._link(project_id, item_id, is_subtask)
        if link is None:
            return None
        return self.rules.get(project_id, link.recurrence_rule_id)

    def sync(
        self,
        project_id: str,
        item_id: str,
        is_subtask: bool,
        rule: Optional[RecurrenceRule],
        user_id: str,
    ) -> Optional[RecurrenceRule]:
        """Durably associate `rule` with a task or sub-task.

        `None` removes the association (and retires the previous rule); a rule
        replaces any previous association.
        """
        link = self._link(project_id, item_id, is_subtask)
        previous_rule_id = link.recurrence_rule_id if link is not None else None

        if rule is None:
            if link is None:
                return None
            try:
                self.db.delete(link)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                logger.error(f"Failed to remove recurrence from item {item_id}: {type(e).__name__}: {str(e)}")
                raise
            self.rules.soft_delete(project_id, previous_rule_id, user_id)
            return None

        # Editing the current rule keeps its id; a fresh rule replaces it.
        if rule.id is None and previous_rule_id is not None:
            rule = rule.model_copy(update={"id": previous_rule_id})
        saved = self.rules.save(project_id, rule, user_id)

        if link is None:
            link = ItemRecurrenceDB(
                project_id=project_id,
                item_id=item_id,
                is_subtask=is_subtask,
                recurrence_rule_id=saved.id,
                updated_by=user_id,
            )
            self.db.add(link)
        else:
            link.recurrence_rule_id = saved.id
            link.updated_by = user_id
            link.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to link recurrence rule to item {item_id}: {type(e).__name__}: {str(e)}")
            raise

        if previous_rule_id is not None and previous_rule_id != saved.id:
            self.rules.soft_delete(project_id, previous_rule_id, user_id)
        return saved
