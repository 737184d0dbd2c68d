"""Request-scoped access to the engine owned by the app."""

from fastapi import Request

from emochild.engine import StateEngine


def get_engine(request: Request) -> StateEngine:
    return request.app.state.engine
