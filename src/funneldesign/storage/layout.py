"""On-disk layout of the store.

    <root>/
    ├── projects/<projectId>.json
    └── entities/<entityId>.json
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path

from funneldesign.storage.errors import InvalidDataError

logger = logging.getLogger(__name__)

# One file name inside a collection directory: no separators, no leading dot
_RECORD_ID = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


class Collection(str, Enum):
    PROJECTS = "projects"
    ENTITIES = "entities"


class StoreContext:
    """Resolved storage root plus the lazily computed "directories exist" flag."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._ready_root: Path | None = None

    def ensure_ready(self) -> None:
        """Create the collection directories once per root. Idempotent."""
        if self._ready_root == self.root:
            return
        for collection in Collection:
            (self.root / collection.value).mkdir(parents=True, exist_ok=True)
        self._ready_root = self.root
        logger.debug("Store ready at %s", self.root)

    def reset(self, root: Path | None = None) -> None:
        """Forget initialization state, optionally pointing at a new root."""
        if root is not None:
            self.root = Path(root)
        self._ready_root = None

    @property
    def is_ready(self) -> bool:
        return self._ready_root == self.root

    def collection_dir(self, collection: Collection) -> Path:
        return self.root / collection.value

    def path_for(self, collection: Collection, record_id: str) -> Path:
        if not _RECORD_ID.fullmatch(record_id):
            raise InvalidDataError(f"Invalid {collection.value} id: {record_id!r}")
        return self.collection_dir(collection) / f"{record_id}.json"
