"""Funnel entities: the four framework variants stored under a project.

Every variant shares the envelope in ``EntityBase`` and is tagged by a
``type`` literal, so ``Entity`` validates any stored document into the right
class.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from funneldesign.models.base import FunnelModel, Percent
from funneldesign.models.citations import ResearchMetadata

Level = Literal["high", "medium", "low"]


class EntityBase(FunnelModel):
    """Envelope common to every entity variant."""

    id: str
    project_id: str
    created_at: str
    updated_at: str
    name: str
    description: str | None = None
    research_metadata: ResearchMetadata | None = None


# ── AIDA funnel ──────────────────────────────────────────────


class AttentionChannel(FunnelModel):
    channel: str
    tactic: str | None = None
    budget: str | None = None
    expected_reach: str | None = None


class Hook(FunnelModel):
    hook: str
    format: Literal["headline", "visual", "video", "audio", "interactive"] | None = None


class Attention(FunnelModel):
    channels: list[AttentionChannel]
    hooks: list[Hook] | None = None
    target_audience: str | None = None


class InterestContent(FunnelModel):
    type: str
    purpose: str | None = None
    format: str | None = None


class Interest(FunnelModel):
    content_types: list[InterestContent]
    engagement_tactics: list[str] | None = None
    value_proposition: str | None = None
    pain_points_addressed: list[str] | None = None


class SocialProof(FunnelModel):
    type: Literal["testimonial", "case-study", "review", "endorsement", "statistic"]
    content: str


class Benefit(FunnelModel):
    benefit: str
    emotional_trigger: str | None = None


class Objection(FunnelModel):
    objection: str
    response: str


class Desire(FunnelModel):
    social_proof: list[SocialProof] | None = None
    benefits: list[Benefit]
    urgency_tactics: list[str] | None = None
    objection_handling: list[Objection] | None = None


class PrimaryCta(FunnelModel):
    text: str
    destination: str | None = None
    placement: str | None = None


class SecondaryCta(FunnelModel):
    text: str
    destination: str | None = None


class Action(FunnelModel):
    primary_cta: PrimaryCta
    secondary_ctas: list[SecondaryCta] | None = None
    friction_reducers: list[str] | None = None
    conversion_goal: str | None = None
    expected_conversion_rate: str | None = None


class AidaMetrics(FunnelModel):
    awareness_kpis: list[str] | None = None
    engagement_kpis: list[str] | None = None
    conversion_kpis: list[str] | None = None


class AidaFunnel(EntityBase):
    """Attention, Interest, Desire, Action."""

    type: Literal["aida-funnel"] = "aida-funnel"
    attention: Attention
    interest: Interest
    desire: Desire
    action: Action
    metrics: AidaMetrics | None = None


# ── Content funnel (TOFU / MOFU / BOFU) ──────────────────────


class TofuContent(FunnelModel):
    type: str
    topic: str
    format: str | None = None
    distribution_channel: str | None = None


class Tofu(FunnelModel):
    goal: str
    audience: str | None = None
    content_types: list[TofuContent]
    keywords: list[str] | None = None
    cta: str | None = None
    success_metrics: list[str] | None = None


class MofuContent(FunnelModel):
    type: str
    topic: str
    format: str | None = None
    gating_strategy: Literal["gated", "ungated", "partial"] | None = None


class LeadMagnet(FunnelModel):
    name: str
    type: str
    value_proposition: str | None = None


class EmailSequence(FunnelModel):
    name: str
    emails: int
    goal: str | None = None


class Mofu(FunnelModel):
    goal: str
    nurturing_strategy: str | None = None
    content_types: list[MofuContent]
    lead_magnets: list[LeadMagnet] | None = None
    email_sequences: list[EmailSequence] | None = None
    success_metrics: list[str] | None = None


class BofuContent(FunnelModel):
    type: str
    topic: str
    format: str | None = None


class SalesAsset(FunnelModel):
    asset: str
    use_case: str | None = None


class Bofu(FunnelModel):
    goal: str
    content_types: list[BofuContent]
    sales_enablement: list[SalesAsset] | None = None
    conversion_tactics: list[str] | None = None
    pricing_strategy: str | None = None
    success_metrics: list[str] | None = None


class CalendarEntry(FunnelModel):
    stage: Literal["tofu", "mofu", "bofu"]
    content_piece: str
    publish_date: str | None = None
    owner: str | None = None
    status: Literal["planned", "in-progress", "review", "published"] | None = None


class ContentFunnel(EntityBase):
    type: Literal["content-funnel"] = "content-funnel"
    tofu: Tofu
    mofu: Mofu
    bofu: Bofu
    content_calendar: list[CalendarEntry] | None = None


# ── Conversion funnel ────────────────────────────────────────


class ConversionStage(FunnelModel):
    name: str
    description: str | None = None
    entry_criteria: str | None = None
    exit_criteria: str | None = None
    volume: int | float | None = None
    conversion_rate: Percent | None = None
    average_time_in_stage: str | None = None
    key_actions: list[str] | None = None
    drop_off_reasons: list[str] | None = None
    optimization_notes: str | None = None


class TrafficSource(FunnelModel):
    source: str
    medium: str | None = None
    volume: int | float | None = None
    quality_score: Percent | None = None
    cost: str | None = None
    conversion_rate: Percent | None = None


class OverallMetrics(FunnelModel):
    total_visitors: int | float | None = None
    total_conversions: int | float | None = None
    overall_conversion_rate: Percent | None = None
    average_deal_value: str | None = None
    customer_acquisition_cost: str | None = None
    time_to_conversion: str | None = None


class Bottleneck(FunnelModel):
    stage: str
    issue: str
    impact: Level | None = None
    proposed_solution: str | None = None


class ConversionFunnel(EntityBase):
    """Stage-by-stage conversion metrics."""

    type: Literal["conversion-funnel"] = "conversion-funnel"
    stages: list[ConversionStage]
    traffic_sources: list[TrafficSource] | None = None
    overall_metrics: OverallMetrics | None = None
    bottlenecks: list[Bottleneck] | None = None


# ── Customer journey ─────────────────────────────────────────


class Touchpoint(FunnelModel):
    channel: str
    interaction: str
    owner: str | None = None


class Emotion(FunnelModel):
    feeling: str
    intensity: Literal[
        "very-positive", "positive", "neutral", "negative", "very-negative"
    ] | None = None


class JourneyStage(FunnelModel):
    name: str
    description: str | None = None
    customer_goal: str
    duration: str | None = None
    touchpoints: list[Touchpoint]
    emotions: Emotion | None = None
    pain_points: list[str] | None = None
    opportunities: list[str] | None = None
    key_questions: list[str] | None = None


class MomentOfTruth(FunnelModel):
    stage: str
    moment: str
    importance: Literal["critical", "important", "moderate"] | None = None
    current_experience: str | None = None
    desired_experience: str | None = None


class JourneyChannel(FunnelModel):
    name: str
    role: str | None = None
    effectiveness: Level | None = None


class Improvement(FunnelModel):
    stage: str
    improvement: str
    priority: Level | None = None
    effort: Level | None = None
    expected_impact: str | None = None


class CustomerJourney(EntityBase):
    type: Literal["customer-journey"] = "customer-journey"
    persona_reference: str | None = None
    stages: list[JourneyStage]
    moments_of_truth: list[MomentOfTruth] | None = None
    channels: list[JourneyChannel] | None = None
    improvements: list[Improvement] | None = None


Entity = Annotated[
    Union[AidaFunnel, ContentFunnel, ConversionFunnel, CustomerJourney],
    Field(discriminator="type"),
]

ENTITY_CLASSES: dict[str, type[EntityBase]] = {
    "aida-funnel": AidaFunnel,
    "content-funnel": ContentFunnel,
    "conversion-funnel": ConversionFunnel,
    "customer-journey": CustomerJourney,
}

_entity_adapter: TypeAdapter[Entity] = TypeAdapter(Entity)


def parse_entity(data: dict[str, Any]) -> EntityBase:
    """Validate a stored entity document into its variant model."""
    return _entity_adapter.validate_python(data)
