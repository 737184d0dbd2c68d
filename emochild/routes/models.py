"""Pydantic request models for API endpoints.

Fields are deliberately loose; the engine does the domain validation and
its ValidationError is mapped to HTTP 422 by the routes.
"""

from pydantic import BaseModel


class AddLogBody(BaseModel):
    text: str
    action: str
    text_color: str | None = None
    quick_emotion: str | None = None


class CustomizationBody(BaseModel):
    name: str
    color: str
    has_bow: bool = False


class TextColorBody(BaseModel):
    color: str


class MicroIndexBody(BaseModel):
    index: int
