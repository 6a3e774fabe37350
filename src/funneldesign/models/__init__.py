"""Funnel design data models."""

from funneldesign.models.citations import Citation, ResearchMetadata
from funneldesign.models.entities import (
    ENTITY_CLASSES,
    AidaFunnel,
    ContentFunnel,
    ConversionFunnel,
    CustomerJourney,
    Entity,
    EntityBase,
    parse_entity,
)
from funneldesign.models.project import ENTITY_TYPES, EntityRef, EntityType, Project

__all__ = [
    "ENTITY_CLASSES",
    "ENTITY_TYPES",
    "AidaFunnel",
    "Citation",
    "ContentFunnel",
    "ConversionFunnel",
    "CustomerJourney",
    "Entity",
    "EntityBase",
    "EntityRef",
    "EntityType",
    "Project",
    "ResearchMetadata",
    "parse_entity",
]
