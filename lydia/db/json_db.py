import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import structlog

from lydia.core.config import settings

logger = structlog.get_logger()

INITIAL_DOCUMENT: Dict[str, Any] = {
    "products": [],
    "newsletter": [],
    "contacts": [],
    "carts": {},
    "orders": [],
}


class JsonDatabase:
    """
    Flat-file JSON document store.

    Every read loads the whole file and every write replaces it. There is no
    locking: two requests doing read-modify-write at the same time can lose an
    update (last write wins).
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def ensure(self) -> None:
        """Create the data directory and an empty document if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.write(deepcopy(INITIAL_DOCUMENT))
            logger.info("json_db_created", path=str(self.path))

    def read(self) -> Dict[str, Any]:
        if not self.path.exists():
            self.ensure()
        with self.path.open("r", encoding="utf-8") as fh:
            db = json.load(fh)
        # Documents written by older versions may lack newer collections.
        for key, default in INITIAL_DOCUMENT.items():
            db.setdefault(key, deepcopy(default))
        return db

    def write(self, db: Dict[str, Any]) -> None:
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(db, fh, indent=2, ensure_ascii=False)


_database = JsonDatabase(settings.DB_FILE)


def get_db() -> JsonDatabase:
    """Database dependency for FastAPI dependency injection"""
    return _database
