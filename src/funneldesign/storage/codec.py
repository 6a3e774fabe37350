"""One JSON file per record, named by id.

File I/O runs in worker threads so every operation is awaitable and
independent operations can be gathered.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from funneldesign.storage.errors import StorageError, StorageErrorCode
from funneldesign.storage.layout import Collection, StoreContext

logger = logging.getLogger(__name__)


@dataclass
class SkippedRecord:
    """A file the collection scan could not load."""

    path: Path
    error: str


@dataclass
class ScanResult:
    """Outcome of a best-effort collection scan."""

    records: list[Any] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)


@dataclass
class Change:
    """One file-level mutation. ``record=None`` deletes the file."""

    collection: Collection
    record_id: str
    record: dict[str, Any] | None = None

    @classmethod
    def put(cls, collection: Collection, record_id: str, record: dict[str, Any]) -> Change:
        return cls(collection, record_id, record)

    @classmethod
    def remove(cls, collection: Collection, record_id: str) -> Change:
        return cls(collection, record_id, None)


class RecordCodec:
    """Serialize records to ``<collection>/<id>.json`` and back."""

    def __init__(self, context: StoreContext) -> None:
        self.context = context

    # ── Public async API ─────────────────────────────────────

    async def write(self, collection: Collection, record_id: str, record: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, collection, record_id, record)

    async def read(self, collection: Collection, record_id: str) -> dict[str, Any] | None:
        """Return the record, or None when no file exists for ``record_id``."""
        return await asyncio.to_thread(self._read, collection, record_id)

    async def delete(self, collection: Collection, record_id: str) -> bool:
        """Remove the record file. False when it was already absent."""
        return await asyncio.to_thread(self._delete, collection, record_id)

    async def list_all(
        self,
        collection: Collection,
        parse: Callable[[dict[str, Any]], Any] | None = None,
    ) -> ScanResult:
        """Load every ``*.json`` in the collection, skipping unreadable files."""
        return await asyncio.to_thread(self._list_all, collection, parse)

    async def apply(self, changes: list[Change]) -> None:
        """Apply changes strictly in order, one file operation each.

        Not crash-consistent: a failure part-way leaves earlier changes on disk.
        """
        for change in changes:
            if change.record is None:
                await self.delete(change.collection, change.record_id)
            else:
                await self.write(change.collection, change.record_id, change.record)

    # ── Sync implementations (run in threads) ────────────────

    def _write(self, collection: Collection, record_id: str, record: dict[str, Any]) -> None:
        self.context.ensure_ready()
        path = self.context.path_for(collection, record_id)
        # Write-then-rename so concurrent readers never see a truncated file
        tmp = path.with_name(f".{path.name}.{secrets.token_hex(4)}.tmp")
        try:
            tmp.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(
                f"Failed to write {collection.value} record {record_id}",
                StorageErrorCode.WRITE_FAILED,
                e,
            ) from e

    def _read(self, collection: Collection, record_id: str) -> dict[str, Any] | None:
        self.context.ensure_ready()
        path = self.context.path_for(collection, record_id)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Failed to read {collection.value} record {record_id}",
                StorageErrorCode.READ_FAILED,
                e,
            ) from e

    def _delete(self, collection: Collection, record_id: str) -> bool:
        self.context.ensure_ready()
        path = self.context.path_for(collection, record_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(
                f"Failed to delete {collection.value} record {record_id}",
                StorageErrorCode.DELETE_FAILED,
                e,
            ) from e
        return True

    def _list_all(
        self,
        collection: Collection,
        parse: Callable[[dict[str, Any]], Any] | None,
    ) -> ScanResult:
        self.context.ensure_ready()
        result = ScanResult()
        for path in sorted(self.context.collection_dir(collection).glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                result.records.append(parse(data) if parse else data)
            except Exception as e:
                logger.warning("Skipping unreadable %s file %s: %s", collection.value, path.name, e)
                result.skipped.append(SkippedRecord(path=path, error=str(e)))
        return result
