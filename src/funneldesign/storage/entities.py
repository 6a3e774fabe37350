"""Entity records and their references in the owning project.

A project's ``entities`` list mirrors the entity files whose ``projectId``
points at it. Creating an entity writes the entity file first and the
project second; a crash in between leaves an orphan entity that project
listings never see but ``get`` still returns.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from funneldesign.models import EntityBase, EntityRef, EntityType, parse_entity
from funneldesign.storage.codec import Change, RecordCodec
from funneldesign.storage.errors import ProjectNotFoundError, StorageError, StorageErrorCode
from funneldesign.storage.ids import new_id, now
from funneldesign.storage.layout import Collection
from funneldesign.storage.projects import ProjectStore

logger = logging.getLogger(__name__)

_ENVELOPE_FIELDS = {
    "id",
    "projectId",
    "project_id",
    "createdAt",
    "created_at",
    "updatedAt",
    "updated_at",
}


class EntityStore:
    """Read/write access to ``entities/``."""

    def __init__(self, codec: RecordCodec, projects: ProjectStore) -> None:
        self.codec = codec
        self.projects = projects
        projects.attach(self)

    async def create(self, project_id: str, payload: dict[str, Any]) -> EntityBase:
        """Create an entity from a variant payload and reference it from its project.

        The payload is an untyped document carrying ``type`` and the variant's
        fields; envelope fields in it are ignored and assigned here.
        """
        project = await self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        ts = now()
        document = {k: v for k, v in payload.items() if k not in _ENVELOPE_FIELDS}
        document.update(id=new_id(), projectId=project_id, createdAt=ts, updatedAt=ts)
        entity = parse_entity(document)

        project.entities.append(EntityRef(id=entity.id, type=entity.type))
        await self.codec.apply([
            Change.put(Collection.ENTITIES, entity.id, entity.to_record()),
            self.projects.stage_update(project),
        ])
        logger.info("Created %s %s in project %s", entity.type, entity.id, project_id)
        return entity

    async def get(self, entity_id: str) -> EntityBase | None:
        data = await self.codec.read(Collection.ENTITIES, entity_id)
        if data is None:
            return None
        try:
            return parse_entity(data)
        except ValidationError as e:
            raise StorageError(
                f"Failed to read entity {entity_id}", StorageErrorCode.READ_FAILED, e
            ) from e

    async def update(self, entity: EntityBase) -> EntityBase:
        """Overwrite the stored record. Callers merge partial changes first."""
        entity.updated_at = now()
        await self.codec.write(Collection.ENTITIES, entity.id, entity.to_record())
        return entity

    async def delete(self, entity_id: str) -> bool:
        entity = await self.get(entity_id)
        if entity is None:
            return False

        project = await self.projects.get(entity.project_id)
        if project is not None:
            project.entities = [ref for ref in project.entities if ref.id != entity_id]
            await self.projects.update(project)

        deleted = await self.codec.delete(Collection.ENTITIES, entity_id)
        if deleted:
            logger.info("Deleted %s %s", entity.type, entity_id)
        return deleted

    async def _load_listed(self, entity_id: str) -> EntityBase | None:
        """Like ``get``, but a record that no longer validates is skipped."""
        data = await self.codec.read(Collection.ENTITIES, entity_id)
        if data is None:
            return None
        try:
            return parse_entity(data)
        except ValidationError as e:
            logger.warning("Skipping invalid entity %s: %s", entity_id, e)
            return None

    async def list_by_project(self, project_id: str) -> list[EntityBase]:
        """Resolve the project's references.

        References whose file is gone, or whose record fails validation, are
        dropped rather than failing the whole listing.
        """
        project = await self.projects.get(project_id)
        if project is None:
            return []

        entities = await asyncio.gather(*(self._load_listed(ref.id) for ref in project.entities))
        missing = len(entities) - sum(e is not None for e in entities)
        if missing:
            logger.debug("Project %s has %d unresolved entity references", project_id, missing)
        return [e for e in entities if e is not None]

    async def list_by_type(self, project_id: str, type: EntityType) -> list[EntityBase]:
        entities = await self.list_by_project(project_id)
        return [e for e in entities if e.type == type]
