"""EmoChild — dev launcher. Serves the local API with uvicorn."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "13015"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def main():
    parser = argparse.ArgumentParser(description="EmoChild dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--demo", action="store_true",
                        help="Clean and create demo journaling data")
    parser.add_argument("--reload", action="store_true",
                        help="Restart the server on code changes")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # The app factory reads DATA_DIR, so export the CLI choice for it
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())

    if args.demo:
        from emochild.app import resolve_data_dir
        from emochild.demo import create_demo_data
        from emochild.engine import StateEngine
        from emochild.storage import Storage
        from emochild.store import FileStore

        engine = StateEngine(Storage(FileStore(resolve_data_dir(args.data_dir))))
        engine.initialize()
        create_demo_data(engine)

    print(f"Starting EmoChild API on http://{HOST}:{PORT}/api ...")
    uvicorn.run(
        "emochild.app:create_app", factory=True,
        host=HOST, port=PORT, reload=args.reload, log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
