"""Research provenance attached to entities."""

from __future__ import annotations

from funneldesign.models.base import FunnelModel, Percent


class Citation(FunnelModel):
    """A source backing one or more researched fields."""

    id: str
    title: str
    url: str
    accessed_at: str
    relevant_fields: list[str] = []


class ResearchMetadata(FunnelModel):
    citations: list[Citation] | None = None
    researched_at: str | None = None
    research_model: str | None = None
    confidence: Percent | None = None
    raw_content: str | None = None
