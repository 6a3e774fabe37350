"""File-backed store for projects and their funnel entities.

Layout:
    <data_dir>/
    ├── projects/<projectId>.json     # one Project per file
    └── entities/<entityId>.json      # one entity per file, any variant

No locking: concurrent writers to the same record race and the last
write wins.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from funneldesign.storage.codec import Change, RecordCodec, ScanResult, SkippedRecord
from funneldesign.storage.entities import EntityStore
from funneldesign.storage.errors import (
    EntityNotFoundError,
    InvalidDataError,
    ProjectNotFoundError,
    StorageError,
    StorageErrorCode,
)
from funneldesign.storage.export import ExportFormat, Exporter
from funneldesign.storage.layout import Collection, StoreContext
from funneldesign.storage.projects import ProjectStore

if TYPE_CHECKING:
    from funneldesign.config import FunnelConfig


class Storage:
    """Project store, entity store and exporter sharing one root."""

    def __init__(self, root: Path) -> None:
        self.context = StoreContext(root)
        self.codec = RecordCodec(self.context)
        self.projects = ProjectStore(self.codec)
        self.entities = EntityStore(self.codec, self.projects)
        self.exporter = Exporter(self.projects, self.entities)

    @classmethod
    def from_config(cls, config: FunnelConfig) -> Storage:
        return cls(config.data_dir)

    @property
    def root(self) -> Path:
        return self.context.root


__all__ = [
    "Change",
    "Collection",
    "EntityNotFoundError",
    "EntityStore",
    "ExportFormat",
    "Exporter",
    "InvalidDataError",
    "ProjectNotFoundError",
    "ProjectStore",
    "RecordCodec",
    "ScanResult",
    "SkippedRecord",
    "Storage",
    "StorageError",
    "StorageErrorCode",
    "StoreContext",
]
