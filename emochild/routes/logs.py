"""Emotion log endpoints: list, add, delete."""

from fastapi import APIRouter, Depends, HTTPException

from emochild.engine import StateEngine
from emochild.errors import ValidationError

from .deps import get_engine
from .models import AddLogBody

router = APIRouter()


@router.get("/logs")
async def list_logs(newest_first: bool = True, engine: StateEngine = Depends(get_engine)):
    """Logs in chronological order (newest first by default)."""
    return engine.history(newest_first=newest_first)


@router.post("/logs", status_code=201)
async def add_log(body: AddLogBody, engine: StateEngine = Depends(get_engine)):
    """Log an emotion; the creature reacts. Returns the fresh snapshot."""
    try:
        return engine.add_log(
            body.text, body.action,
            text_color=body.text_color, quick_emotion=body.quick_emotion,
        )
    except ValidationError as e:
        raise HTTPException(422, str(e))


@router.delete("/logs/{log_id}")
async def delete_log(log_id: str, engine: StateEngine = Depends(get_engine)):
    """Delete a log by id. Unknown ids are not an error."""
    return engine.delete_log(log_id)
