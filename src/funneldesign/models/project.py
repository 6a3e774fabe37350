"""Project: the named container that owns funnel entities."""

from __future__ import annotations

from typing import Literal, get_args

from funneldesign.models.base import FunnelModel

EntityType = Literal[
    "aida-funnel",
    "content-funnel",
    "conversion-funnel",
    "customer-journey",
]

ENTITY_TYPES: tuple[str, ...] = get_args(EntityType)


class EntityRef(FunnelModel):
    """Lightweight pointer a project keeps per owned entity."""

    id: str
    type: EntityType


class Project(FunnelModel):
    id: str
    name: str
    description: str | None = None
    tags: list[str] | None = None
    created_at: str
    updated_at: str
    entities: list[EntityRef] = []
