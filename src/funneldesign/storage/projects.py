"""Project records: CRUD, recency listing and cascading delete."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from funneldesign.models import Project
from funneldesign.storage.codec import Change, RecordCodec, ScanResult
from funneldesign.storage.errors import StorageError, StorageErrorCode
from funneldesign.storage.ids import new_id, now, parse_timestamp
from funneldesign.storage.layout import Collection

if TYPE_CHECKING:
    from funneldesign.storage.entities import EntityStore

logger = logging.getLogger(__name__)


def _parse_listed(data: dict) -> Project:
    project = Project.model_validate(data)
    # Unparsable timestamps would break the recency sort
    parse_timestamp(project.updated_at)
    return project


class ProjectStore:
    """Read/write access to ``projects/``."""

    def __init__(self, codec: RecordCodec) -> None:
        self.codec = codec
        self._entities: EntityStore | None = None

    def attach(self, entities: EntityStore) -> None:
        """Bind the entity store used for cascading deletes."""
        self._entities = entities

    async def create(
        self,
        name: str,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> Project:
        ts = now()
        project = Project(
            id=new_id(),
            name=name,
            description=description,
            tags=tags,
            created_at=ts,
            updated_at=ts,
            entities=[],
        )
        await self.codec.write(Collection.PROJECTS, project.id, project.to_record())
        logger.info("Created project %s (%s)", project.id, name)
        return project

    async def get(self, project_id: str) -> Project | None:
        data = await self.codec.read(Collection.PROJECTS, project_id)
        if data is None:
            return None
        try:
            return Project.model_validate(data)
        except ValidationError as e:
            raise StorageError(
                f"Failed to read project {project_id}", StorageErrorCode.READ_FAILED, e
            ) from e

    def stage_update(self, project: Project) -> Change:
        """Touch ``updated_at`` and return the write that persists it."""
        project.updated_at = now()
        return Change.put(Collection.PROJECTS, project.id, project.to_record())

    async def update(self, project: Project) -> Project:
        """Overwrite the stored record. Callers merge partial changes first."""
        await self.codec.apply([self.stage_update(project)])
        return project

    async def delete(self, project_id: str) -> bool:
        """Delete the project after deleting every entity it references."""
        project = await self.get(project_id)
        if project is None:
            return False

        if self._entities is None:
            raise RuntimeError("ProjectStore has no EntityStore attached")
        await asyncio.gather(*(self._entities.delete(ref.id) for ref in project.entities))

        deleted = await self.codec.delete(Collection.PROJECTS, project_id)
        if deleted:
            logger.info(
                "Deleted project %s with %d entities", project_id, len(project.entities)
            )
        return deleted

    async def scan(self) -> ScanResult:
        """All parsable projects plus the files that were skipped."""
        return await self.codec.list_all(Collection.PROJECTS, parse=_parse_listed)

    async def list(self) -> list[Project]:
        """Every readable project, most recently updated first."""
        result = await self.scan()
        return sorted(result.records, key=lambda p: parse_timestamp(p.updated_at), reverse=True)
