"""Create/update tools for the four funnel frameworks.

Update tools merge the supplied fields over the stored record; omitted
fields keep their current values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from funneldesign.models import AidaFunnel, ContentFunnel, ConversionFunnel, CustomerJourney
from funneldesign.models.entities import (
    Action,
    AidaMetrics,
    Attention,
    Bofu,
    Bottleneck,
    CalendarEntry,
    ConversionStage,
    Desire,
    EntityBase,
    Improvement,
    Interest,
    JourneyChannel,
    JourneyStage,
    Mofu,
    MomentOfTruth,
    OverallMetrics,
    Tofu,
    TrafficSource,
)
from funneldesign.storage.errors import EntityNotFoundError
from funneldesign.tools.base import ToolArgs, ToolDefinition, merge_update

if TYPE_CHECKING:
    from funneldesign.storage import Storage


class CreateEntityArgs(ToolArgs):
    project_id: str = Field(description="The project ID to add this entity to")
    name: str = Field(description="Name for this entity")
    description: str | None = Field(default=None, description="Optional description")


class UpdateEntityArgs(ToolArgs):
    entity_id: str = Field(description="The entity ID to update")
    name: str | None = Field(default=None, description="Updated name")
    description: str | None = Field(default=None, description="Updated description")


# ── Argument models ──────────────────────────────────────────


class CreateAidaFunnelArgs(CreateEntityArgs):
    attention: Attention = Field(description="Attention stage: channels, hooks, audience")
    interest: Interest = Field(description="Interest stage: content and value proposition")
    desire: Desire = Field(description="Desire stage: benefits, social proof, objections")
    action: Action = Field(description="Action stage: calls to action and conversion goal")
    metrics: AidaMetrics | None = Field(default=None, description="KPIs per stage")


class UpdateAidaFunnelArgs(UpdateEntityArgs):
    attention: Attention | None = None
    interest: Interest | None = None
    desire: Desire | None = None
    action: Action | None = None
    metrics: AidaMetrics | None = None


class CreateContentFunnelArgs(CreateEntityArgs):
    tofu: Tofu = Field(description="Top of funnel: awareness content")
    mofu: Mofu = Field(description="Middle of funnel: consideration and nurturing")
    bofu: Bofu = Field(description="Bottom of funnel: decision content")
    content_calendar: list[CalendarEntry] | None = Field(
        default=None, description="Planned content pieces per stage"
    )


class UpdateContentFunnelArgs(UpdateEntityArgs):
    tofu: Tofu | None = None
    mofu: Mofu | None = None
    bofu: Bofu | None = None
    content_calendar: list[CalendarEntry] | None = None


class CreateConversionFunnelArgs(CreateEntityArgs):
    stages: list[ConversionStage] = Field(description="Funnel stages from top to bottom")
    traffic_sources: list[TrafficSource] | None = Field(
        default=None, description="Traffic sources feeding the funnel"
    )
    overall_metrics: OverallMetrics | None = Field(default=None, description="Overall funnel metrics")
    bottlenecks: list[Bottleneck] | None = Field(default=None, description="Identified bottlenecks")


class UpdateConversionFunnelArgs(UpdateEntityArgs):
    stages: list[ConversionStage] | None = None
    traffic_sources: list[TrafficSource] | None = None
    overall_metrics: OverallMetrics | None = None
    bottlenecks: list[Bottleneck] | None = None


class CreateCustomerJourneyArgs(CreateEntityArgs):
    persona_reference: str | None = Field(default=None, description="Persona this journey follows")
    stages: list[JourneyStage] = Field(description="Journey stages in order")
    moments_of_truth: list[MomentOfTruth] | None = None
    channels: list[JourneyChannel] | None = None
    improvements: list[Improvement] | None = None


class UpdateCustomerJourneyArgs(UpdateEntityArgs):
    persona_reference: str | None = None
    stages: list[JourneyStage] | None = None
    moments_of_truth: list[MomentOfTruth] | None = None
    channels: list[JourneyChannel] | None = None
    improvements: list[Improvement] | None = None


# ── Handlers ─────────────────────────────────────────────────


def _creator(entity_type: str):
    async def create(storage: Storage, args: CreateEntityArgs) -> EntityBase:
        payload = args.model_dump(by_alias=True, exclude_none=True, exclude={"project_id"})
        payload["type"] = entity_type
        return await storage.entities.create(args.project_id, payload)

    return create


def _updater(entity_cls: type[EntityBase], label: str):
    async def update(storage: Storage, args: UpdateEntityArgs) -> EntityBase:
        existing = await storage.entities.get(args.entity_id)
        if not isinstance(existing, entity_cls):
            raise EntityNotFoundError(args.entity_id, label)
        return await storage.entities.update(
            merge_update(existing, args, exclude={"entity_id"})
        )

    return update


FUNNEL_TOOLS = [
    ToolDefinition(
        "create_aida_funnel",
        "Create an AIDA Funnel (Attention, Interest, Desire, Action)",
        CreateAidaFunnelArgs,
        _creator("aida-funnel"),
    ),
    ToolDefinition(
        "update_aida_funnel",
        "Update an existing AIDA Funnel",
        UpdateAidaFunnelArgs,
        _updater(AidaFunnel, "AIDA Funnel"),
    ),
    ToolDefinition(
        "create_content_funnel",
        "Create a Content Funnel (TOFU/MOFU/BOFU stages)",
        CreateContentFunnelArgs,
        _creator("content-funnel"),
    ),
    ToolDefinition(
        "update_content_funnel",
        "Update an existing Content Funnel",
        UpdateContentFunnelArgs,
        _updater(ContentFunnel, "Content Funnel"),
    ),
    ToolDefinition(
        "create_conversion_funnel",
        "Create a Conversion Funnel with stage metrics and optimization",
        CreateConversionFunnelArgs,
        _creator("conversion-funnel"),
    ),
    ToolDefinition(
        "update_conversion_funnel",
        "Update an existing Conversion Funnel",
        UpdateConversionFunnelArgs,
        _updater(ConversionFunnel, "Conversion Funnel"),
    ),
    ToolDefinition(
        "create_customer_journey",
        "Create a Customer Journey Map with touchpoints and emotions",
        CreateCustomerJourneyArgs,
        _creator("customer-journey"),
    ),
    ToolDefinition(
        "update_customer_journey",
        "Update an existing Customer Journey Map",
        UpdateCustomerJourneyArgs,
        _updater(CustomerJourney, "Customer Journey"),
    ),
]
