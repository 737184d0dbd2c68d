"""Health, snapshot, creature, settings and storage diagnostics endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from emochild.engine import StateEngine
from emochild.errors import ValidationError

from .deps import get_engine
from .models import CustomizationBody, MicroIndexBody, TextColorBody

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/state")
async def get_state(engine: StateEngine = Depends(get_engine)):
    """Full in-memory snapshot."""
    return engine.snapshot


@router.delete("/state")
async def clear_state(engine: StateEngine = Depends(get_engine)):
    """Reset everything to defaults and erase persisted data."""
    return engine.clear_all()


@router.post("/creature/acknowledge")
async def acknowledge_animation(engine: StateEngine = Depends(get_engine)):
    """The UI finished showing the last animation; revert to idle."""
    return engine.acknowledge_animation()


@router.put("/customization")
async def set_customization(body: CustomizationBody, engine: StateEngine = Depends(get_engine)):
    """Replace the creature customization wholesale."""
    try:
        return engine.set_customization(body.model_dump())
    except ValidationError as e:
        raise HTTPException(422, str(e))


@router.put("/text-color")
async def set_text_color(body: TextColorBody, engine: StateEngine = Depends(get_engine)):
    """Remember the display colour for the next log."""
    try:
        return engine.set_text_color_preference(body.color)
    except ValidationError as e:
        raise HTTPException(422, str(e))


@router.put("/micro-index")
async def set_micro_index(body: MicroIndexBody, engine: StateEngine = Depends(get_engine)):
    """Store the micro-sentence cursor."""
    try:
        return engine.set_micro_sentence_index(body.index)
    except ValidationError as e:
        raise HTTPException(422, str(e))


@router.get("/storage/last-error")
async def last_error(engine: StateEngine = Depends(get_engine)):
    """Most recent persistence failure, or null."""
    return {"error": engine.last_error}
