"""FastAPI web application for taskrecur."""

import logging
import os
from datetime import date, datetime
from typing import List, Optional
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taskrecur.database.database import get_db
from taskrecur.database.item_recurrence_repository import ItemRecurrenceRepository
from taskrecur.engine.holidays import CountryHolidayOracle, FixedHolidayOracle, HolidayOracle, NoHolidays
from taskrecur.engine.service import RecurrenceService
from taskrecur.models.constants import DEFAULT_HARD_CAP, DEFAULT_PREVIEW_LIMIT
from taskrecur.models.recurrence import RecurrenceRule

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Holiday calendar used when a request does not bring its own dates
HOLIDAY_COUNTRY = os.getenv("HOLIDAY_COUNTRY")
HOLIDAY_SUBDIV = os.getenv("HOLIDAY_SUBDIV")
RECURRENCE_HARD_CAP = int(os.getenv("RECURRENCE_HARD_CAP", str(DEFAULT_HARD_CAP)))

# Initialize FastAPI app
app = FastAPI(
    title="taskrecur API",
    description="Expands task recurrence rules into concrete, adjusted occurrences",
    version=VERSION,
)


# Request / response models
class PreviewRequest(BaseModel):
    """Request for a recurrence preview."""
    anchor: datetime
    rule: Optional[RecurrenceRule] = None
    limit: int = Field(DEFAULT_PREVIEW_LIMIT, ge=0, le=RECURRENCE_HARD_CAP)
    holiday_dates: Optional[List[date]] = Field(
        None, description="Explicit holiday calendar (overrides HOLIDAY_COUNTRY)"
    )


class PreviewResponse(BaseModel):
    occurrences: List[datetime]


class NextDateRequest(BaseModel):
    base: datetime
    rule: Optional[RecurrenceRule] = None
    holiday_dates: Optional[List[date]] = None


class NextDateResponse(BaseModel):
    next: Optional[datetime]


class ItemRecurrenceRequest(BaseModel):
    """Set (or clear, with rule=null) the recurrence of a task or sub-task."""
    rule: Optional[RecurrenceRule] = None
    user_id: str


class ItemRecurrenceResponse(BaseModel):
    rule: Optional[RecurrenceRule]


_country_oracle: Optional[CountryHolidayOracle] = None


def _oracle_for(holiday_dates: Optional[List[date]]) -> HolidayOracle:
    global _country_oracle

    if holiday_dates is not None:
        return FixedHolidayOracle(holiday_dates)
    if HOLIDAY_COUNTRY:
        if _country_oracle is None:
            _country_oracle = CountryHolidayOracle(HOLIDAY_COUNTRY, subdiv=HOLIDAY_SUBDIV)
        return _country_oracle
    return NoHolidays()


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.post("/recurrence/preview", response_model=PreviewResponse)
def preview_recurrence(request: PreviewRequest):
    """Preview the next occurrences of a rule."""
    service = RecurrenceService(oracle=_oracle_for(request.holiday_dates), hard_cap=RECURRENCE_HARD_CAP)
    try:
        occurrences = service.generate_recurrence_dates(request.anchor, request.rule, request.limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to generate occurrences: {str(e)}")
    return PreviewResponse(occurrences=occurrences)


@app.post("/recurrence/next", response_model=NextDateResponse)
def next_occurrence(request: NextDateRequest):
    """Next occurrence strictly after `base`."""
    service = RecurrenceService(oracle=_oracle_for(request.holiday_dates), hard_cap=RECURRENCE_HARD_CAP)
    try:
        next_date = service.calculate_next_date(request.base, request.rule)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to calculate next occurrence: {str(e)}")
    return NextDateResponse(next=next_date)


def _put_item_recurrence(
    db: Session, project_id: str, item_id: str, is_subtask: bool, request: ItemRecurrenceRequest
) -> ItemRecurrenceResponse:
    repo = ItemRecurrenceRepository(db)
    try:
        saved = repo.sync(project_id, item_id, is_subtask, request.rule, request.user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to save recurrence: {str(e)}")
    return ItemRecurrenceResponse(rule=saved)


def _get_item_recurrence(db: Session, project_id: str, item_id: str, is_subtask: bool) -> ItemRecurrenceResponse:
    rule = ItemRecurrenceRepository(db).get_rule(project_id, item_id, is_subtask)
    if rule is None:
        raise HTTPException(status_code=404, detail="No recurrence set for this item")
    return ItemRecurrenceResponse(rule=rule)


@app.put("/projects/{project_id}/tasks/{task_id}/recurrence", response_model=ItemRecurrenceResponse)
def put_task_recurrence(
    project_id: str, task_id: str, request: ItemRecurrenceRequest, db: Session = Depends(get_db)
):
    """Set or clear a task's recurrence rule."""
    return _put_item_recurrence(db, project_id, task_id, False, request)


@app.get("/projects/{project_id}/tasks/{task_id}/recurrence", response_model=ItemRecurrenceResponse)
def get_task_recurrence(project_id: str, task_id: str, db: Session = Depends(get_db)):
    return _get_item_recurrence(db, project_id, task_id, False)


@app.put("/projects/{project_id}/subtasks/{subtask_id}/recurrence", response_model=ItemRecurrenceResponse)
def put_subtask_recurrence(
    project_id: str, subtask_id: str, request: ItemRecurrenceRequest, db: Session = Depends(get_db)
):
    """Set or clear a sub-task's recurrence rule."""
    return _put_item_recurrence(db, project_id, subtask_id, True, request)


@app.get("/projects/{project_id}/subtasks/{subtask_id}/recurrence", response_model=ItemRecurrenceResponse)
def get_subtask_recurrence(project_id: str, subtask_id: str, db: Session = Depends(get_db)):
    return _get_item_recurrence(db, project_id, subtask_id, True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
