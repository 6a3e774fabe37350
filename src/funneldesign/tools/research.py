"""Turn already-parsed research results into a stored entity.

Running the research itself (prompting, API calls, parsing free text) is
done elsewhere; this tool only maps the parsed sections onto a framework
and records the citations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import Field, ValidationError

from funneldesign.models import Citation, EntityType
from funneldesign.storage.errors import InvalidDataError
from funneldesign.storage.ids import now
from funneldesign.tools.base import ToolArgs, ToolDefinition

if TYPE_CHECKING:
    from funneldesign.storage import Storage


class PopulateFrameworkArgs(ToolArgs):
    project_id: str = Field(description="Project ID to create entity in")
    framework_type: EntityType = Field(description="Framework type to populate")
    name: str = Field(description="Name for the new entity")
    description: str | None = Field(default=None, description="Optional description")
    research_data: dict[str, Any] = Field(description="Parsed research data, keyed by section")
    citations: list[Citation] = Field(description="Citations backing the research data")
    research_model: str | None = Field(default=None, description="Model used for research")
    confidence: int | float | None = Field(
        default=None, description="Confidence score from research"
    )


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _aida_fields(data: dict[str, Any]) -> dict[str, Any]:
    attention, interest = _section(data, "attention"), _section(data, "interest")
    desire, action = _section(data, "desire"), _section(data, "action")
    return {
        "attention": {"channels": attention.get("channels") or []},
        "interest": {"contentTypes": interest.get("contentTypes") or []},
        "desire": {
            "benefits": desire.get("benefits") or [],
            "socialProof": desire.get("socialProof"),
        },
        "action": {
            "primaryCta": action.get("primaryCta") or {"text": "Get Started"},
            "secondaryCtas": action.get("secondaryCtas"),
        },
    }


def _content_fields(data: dict[str, Any]) -> dict[str, Any]:
    tofu, mofu, bofu = (_section(data, k) for k in ("tofu", "mofu", "bofu"))
    return {
        "tofu": {
            "goal": tofu.get("goal") or "Generate awareness",
            "contentTypes": tofu.get("contentTypes") or [],
        },
        "mofu": {
            "goal": mofu.get("goal") or "Nurture leads",
            "contentTypes": mofu.get("contentTypes") or [],
            "leadMagnets": mofu.get("leadMagnets"),
        },
        "bofu": {
            "goal": bofu.get("goal") or "Convert leads",
            "contentTypes": bofu.get("contentTypes") or [],
        },
    }


def _conversion_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "stages": data.get("stages") or [],
        "trafficSources": data.get("trafficSources"),
        "bottlenecks": data.get("bottlenecks"),
    }


def _journey_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "stages": data.get("stages") or [],
        "momentsOfTruth": data.get("momentsOfTruth"),
    }


_FIELD_MAPPERS = {
    "aida-funnel": _aida_fields,
    "content-funnel": _content_fields,
    "conversion-funnel": _conversion_fields,
    "customer-journey": _journey_fields,
}


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    return value


async def populate_framework(storage: Storage, args: PopulateFrameworkArgs) -> dict[str, Any]:
    research_metadata = {
        "citations": [c.to_record() for c in args.citations],
        "researchedAt": now(),
        "researchModel": args.research_model,
        "confidence": args.confidence,
    }
    payload = {
        "type": args.framework_type,
        "name": args.name,
        "description": args.description,
        **_FIELD_MAPPERS[args.framework_type](args.research_data),
        "researchMetadata": research_metadata,
    }
    try:
        entity = await storage.entities.create(args.project_id, _drop_none(payload))
    except ValidationError as e:
        raise InvalidDataError(f"Research data does not fit {args.framework_type}: {e}", e) from e
    return {
        "entityId": entity.id,
        "type": entity.type,
        "name": entity.name,
        "citationCount": len(args.citations),
    }


RESEARCH_TOOLS = [
    ToolDefinition(
        "populate_framework",
        "Create a funnel entity from research results with citations",
        PopulateFrameworkArgs,
        populate_framework,
    ),
]
