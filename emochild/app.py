import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from emochild.engine import StateEngine
from emochild.routes import router
from emochild.storage import Storage
from emochild.store import FileStore, KeyValueStore

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def resolve_data_dir(data_dir: Path | None = None) -> Path:
    return data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))


def create_app(data_dir: Path | None = None, store: KeyValueStore | None = None) -> FastAPI:
    """Build the API over one initialized engine.

    An explicit store wins; otherwise a FileStore at data_dir, the DATA_DIR
    env var, or ./data.
    """
    if store is None:
        resolved = resolve_data_dir(data_dir)
        logger.info("Using data directory %s", resolved)
        store = FileStore(resolved)
    engine = StateEngine(Storage(store))
    engine.initialize()

    app = FastAPI(title="EmoChild")
    app.state.engine = engine
    app.include_router(router, prefix="/api")
    return app
