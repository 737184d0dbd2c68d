"""Core domain models.

The engine, the persistence adapter and the API all operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EmotionAction = Literal["expressed", "suppressed"]

PastelColor = Literal[
    "mint",
    "blue",
    "lavender",
    "peach",
    "pink",
    "yellow",
    "red",
    "orange",
]

TextColor = Literal[
    "white",
    "mint",
    "blue",
    "lavender",
    "peach",
    "pink",
    "yellow",
    "red",
    "orange",
]

QuickEmotion = Literal[
    "stressed",
    "anxious",
    "calm",
    "excited",
    "sad",
    "angry",
    "confused",
    "grateful",
    "curious",
    "scared",
]

Animation = Literal["idle", "grow", "curl", "celebrate"]

DEFAULT_TEXT_COLOR: TextColor = "white"
MAX_LOG_TEXT = 100
MAX_CREATURE_NAME = 50


class EmotionLog(BaseModel):
    """One journaling event. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    text: str = Field(min_length=1, max_length=MAX_LOG_TEXT)
    action: EmotionAction
    timestamp: int = Field(ge=0)  # ms since the Unix epoch
    text_color: TextColor = DEFAULT_TEXT_COLOR
    quick_emotion: QuickEmotion | None = None  # free-text logs carry none


class CreatureState(BaseModel):
    """Derived avatar parameters. Brightness and size live in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    brightness: int = Field(default=50, ge=0, le=100)
    size: int = Field(default=50, ge=0, le=100)
    animation: Animation = "idle"


class CreatureCustomization(BaseModel):
    """User-chosen look of the creature. Replaced wholesale by settings."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=MAX_CREATURE_NAME)
    color: PastelColor
    has_bow: bool


DEFAULT_CUSTOMIZATION = CreatureCustomization(name="EmoChild", color="mint", has_bow=False)


class Snapshot(BaseModel):
    """The whole in-memory application state as seen by the presentation layer."""

    logs: list[EmotionLog] = Field(default_factory=list)
    creature_state: CreatureState = Field(default_factory=CreatureState)
    safety_score: int = Field(default=0, ge=0)
    customization: CreatureCustomization = DEFAULT_CUSTOMIZATION
    text_color_preference: TextColor = DEFAULT_TEXT_COLOR
    micro_sentence_index: int = Field(default=0, ge=0)


class StorageResult(BaseModel):
    """Outcome of a single persistence write."""

    success: bool
    error: str | None = None  # human-readable, set only on failure
