"""Render a project and its resolved entities as JSON or Markdown."""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from funneldesign.models import (
    AidaFunnel,
    ContentFunnel,
    ConversionFunnel,
    CustomerJourney,
    EntityBase,
    Project,
)
from funneldesign.storage.errors import ProjectNotFoundError

if TYPE_CHECKING:
    from funneldesign.storage.entities import EntityStore
    from funneldesign.storage.projects import ProjectStore


class ExportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"


def _num(value: int | float) -> str:
    """Render 50.0 as ``50`` and 12.5 as ``12.5``."""
    return str(int(value)) if float(value).is_integer() else str(value)


# ── Variant sections ─────────────────────────────────────────


def _render_aida(entity: AidaFunnel) -> list[str]:
    out = [f"## AIDA Funnel: {entity.name}\n\n"]
    if entity.description:
        out.append(f"{entity.description}\n\n")

    attention = entity.attention
    out.append("### Attention\n")
    if attention.target_audience:
        out.append(f"**Target Audience:** {attention.target_audience}\n\n")
    out.append("#### Channels\n")
    for ch in attention.channels:
        line = f"- **{ch.channel}**"
        if ch.tactic:
            line += f" - {ch.tactic}"
        if ch.budget:
            line += f" (Budget: {ch.budget})"
        if ch.expected_reach:
            line += f" | Reach: {ch.expected_reach}"
        out.append(line + "\n")
    if attention.hooks:
        out.append("\n#### Hooks\n")
        for hook in attention.hooks:
            line = f"- {hook.hook}"
            if hook.format:
                line += f" ({hook.format})"
            out.append(line + "\n")
    out.append("\n")

    interest = entity.interest
    out.append("### Interest\n")
    if interest.value_proposition:
        out.append(f"**Value Proposition:** {interest.value_proposition}\n\n")
    out.append("#### Content Types\n")
    for ct in interest.content_types:
        line = f"- **{ct.type}**"
        if ct.purpose:
            line += f" - {ct.purpose}"
        if ct.format:
            line += f" ({ct.format})"
        out.append(line + "\n")
    if interest.pain_points_addressed:
        out.append(f"\n**Pain Points Addressed:** {', '.join(interest.pain_points_addressed)}\n")
    out.append("\n")

    desire = entity.desire
    out.append("### Desire\n")
    out.append("#### Benefits\n")
    for ben in desire.benefits:
        line = f"- **{ben.benefit}**"
        if ben.emotional_trigger:
            line += f" (Trigger: {ben.emotional_trigger})"
        out.append(line + "\n")
    if desire.social_proof:
        out.append("\n#### Social Proof\n")
        for sp in desire.social_proof:
            out.append(f"- [{sp.type}] {sp.content}\n")
    if desire.objection_handling:
        out.append("\n#### Objection Handling\n")
        for obj in desire.objection_handling:
            out.append(f"- **{obj.objection}** → {obj.response}\n")
    out.append("\n")

    action = entity.action
    out.append("### Action\n")
    line = f"**Primary CTA:** {action.primary_cta.text}"
    if action.primary_cta.destination:
        line += f" → {action.primary_cta.destination}"
    out.append(line + "\n\n")
    if action.secondary_ctas:
        out.append("**Secondary CTAs:**\n")
        for cta in action.secondary_ctas:
            line = f"- {cta.text}"
            if cta.destination:
                line += f" → {cta.destination}"
            out.append(line + "\n")
        out.append("\n")
    if action.conversion_goal:
        out.append(f"**Conversion Goal:** {action.conversion_goal}\n")
    if action.expected_conversion_rate:
        out.append(f"**Expected Conversion Rate:** {action.expected_conversion_rate}\n")
    out.append("\n")
    return out


def _render_content(entity: ContentFunnel) -> list[str]:
    out = [f"## Content Funnel: {entity.name}\n\n"]
    if entity.description:
        out.append(f"{entity.description}\n\n")

    tofu = entity.tofu
    out.append("### Top of Funnel (TOFU)\n")
    out.append(f"**Goal:** {tofu.goal}\n\n")
    if tofu.audience:
        out.append(f"**Audience:** {tofu.audience}\n\n")
    out.append("#### Content\n")
    for ct in tofu.content_types:
        line = f"- **{ct.type}:** {ct.topic}"
        if ct.format:
            line += f" ({ct.format})"
        if ct.distribution_channel:
            line += f" via {ct.distribution_channel}"
        out.append(line + "\n")
    if tofu.keywords:
        out.append(f"\n**Keywords:** {', '.join(tofu.keywords)}\n")
    if tofu.cta:
        out.append(f"**CTA:** {tofu.cta}\n")
    out.append("\n")

    mofu = entity.mofu
    out.append("### Middle of Funnel (MOFU)\n")
    out.append(f"**Goal:** {mofu.goal}\n\n")
    if mofu.nurturing_strategy:
        out.append(f"**Nurturing Strategy:** {mofu.nurturing_strategy}\n\n")
    out.append("#### Content\n")
    for ct in mofu.content_types:
        line = f"- **{ct.type}:** {ct.topic}"
        if ct.format:
            line += f" ({ct.format})"
        if ct.gating_strategy:
            line += f" [{ct.gating_strategy}]"
        out.append(line + "\n")
    if mofu.lead_magnets:
        out.append("\n#### Lead Magnets\n")
        for lm in mofu.lead_magnets:
            line = f"- **{lm.name}** ({lm.type})"
            if lm.value_proposition:
                line += f": {lm.value_proposition}"
            out.append(line + "\n")
    out.append("\n")

    bofu = entity.bofu
    out.append("### Bottom of Funnel (BOFU)\n")
    out.append(f"**Goal:** {bofu.goal}\n\n")
    out.append("#### Content\n")
    for ct in bofu.content_types:
        line = f"- **{ct.type}:** {ct.topic}"
        if ct.format:
            line += f" ({ct.format})"
        out.append(line + "\n")
    if bofu.conversion_tactics:
        out.append(f"\n**Conversion Tactics:** {', '.join(bofu.conversion_tactics)}\n")
    if bofu.pricing_strategy:
        out.append(f"**Pricing Strategy:** {bofu.pricing_strategy}\n")
    out.append("\n")
    return out


def _render_conversion(entity: ConversionFunnel) -> list[str]:
    out = [f"## Conversion Funnel: {entity.name}\n\n"]
    if entity.description:
        out.append(f"{entity.description}\n\n")

    out.append("### Stages\n")
    for stage in entity.stages:
        out.append(f"#### {stage.name}\n")
        if stage.description:
            out.append(f"{stage.description}\n\n")
        if stage.entry_criteria:
            out.append(f"**Entry:** {stage.entry_criteria}\n")
        if stage.exit_criteria:
            out.append(f"**Exit:** {stage.exit_criteria}\n")
        if stage.volume is not None:
            out.append(f"**Volume:** {_num(stage.volume)}\n")
        if stage.conversion_rate is not None:
            out.append(f"**Conversion Rate:** {_num(stage.conversion_rate)}%\n")
        if stage.average_time_in_stage:
            out.append(f"**Avg Time:** {stage.average_time_in_stage}\n")
        if stage.drop_off_reasons:
            out.append(f"**Drop-off Reasons:** {', '.join(stage.drop_off_reasons)}\n")
        if stage.optimization_notes:
            out.append(f"**Optimization:** {stage.optimization_notes}\n")
        out.append("\n")

    if entity.traffic_sources:
        out.append("### Traffic Sources\n")
        for ts in entity.traffic_sources:
            line = f"- **{ts.source}**"
            if ts.medium:
                line += f" ({ts.medium})"
            if ts.volume is not None:
                line += f" - {_num(ts.volume)} visitors"
            if ts.conversion_rate is not None:
                line += f" | {_num(ts.conversion_rate)}% conversion"
            out.append(line + "\n")
        out.append("\n")

    om = entity.overall_metrics
    if om:
        out.append("### Overall Metrics\n")
        if om.total_visitors is not None:
            out.append(f"- **Total Visitors:** {_num(om.total_visitors)}\n")
        if om.total_conversions is not None:
            out.append(f"- **Total Conversions:** {_num(om.total_conversions)}\n")
        if om.overall_conversion_rate is not None:
            out.append(f"- **Overall Conversion Rate:** {_num(om.overall_conversion_rate)}%\n")
        if om.average_deal_value:
            out.append(f"- **Average Deal Value:** {om.average_deal_value}\n")
        if om.customer_acquisition_cost:
            out.append(f"- **CAC:** {om.customer_acquisition_cost}\n")
        out.append("\n")

    if entity.bottlenecks:
        out.append("### Bottlenecks\n")
        for bn in entity.bottlenecks:
            line = f"- **{bn.stage}:** {bn.issue}"
            if bn.impact:
                line += f" ({bn.impact} impact)"
            if bn.proposed_solution:
                line += f"\n  - Solution: {bn.proposed_solution}"
            out.append(line + "\n")
        out.append("\n")
    return out


def _render_journey(entity: CustomerJourney) -> list[str]:
    out = [f"## Customer Journey: {entity.name}\n\n"]
    if entity.description:
        out.append(f"{entity.description}\n\n")
    if entity.persona_reference:
        out.append(f"**Persona:** {entity.persona_reference}\n\n")

    out.append("### Stages\n")
    for stage in entity.stages:
        out.append(f"#### {stage.name}\n")
        if stage.description:
            out.append(f"{stage.description}\n\n")
        out.append(f"**Customer Goal:** {stage.customer_goal}\n")
        if stage.duration:
            out.append(f"**Duration:** {stage.duration}\n")
        out.append("\n")

        out.append("**Touchpoints:**\n")
        for tp in stage.touchpoints:
            line = f"- {tp.channel}: {tp.interaction}"
            if tp.owner:
                line += f" ({tp.owner})"
            out.append(line + "\n")

        if stage.emotions:
            line = f"\n**Emotion:** {stage.emotions.feeling}"
            if stage.emotions.intensity:
                line += f" ({stage.emotions.intensity})"
            out.append(line + "\n")

        if stage.pain_points:
            out.append(f"**Pain Points:** {', '.join(stage.pain_points)}\n")
        if stage.opportunities:
            out.append(f"**Opportunities:** {', '.join(stage.opportunities)}\n")
        out.append("\n")

    if entity.moments_of_truth:
        out.append("### Moments of Truth\n")
        for mot in entity.moments_of_truth:
            line = f"- **{mot.stage}:** {mot.moment}"
            if mot.importance:
                line += f" ({mot.importance})"
            out.append(line + "\n")
            if mot.current_experience:
                out.append(f"  - Current: {mot.current_experience}\n")
            if mot.desired_experience:
                out.append(f"  - Desired: {mot.desired_experience}\n")
        out.append("\n")

    if entity.improvements:
        out.append("### Improvements\n")
        for imp in entity.improvements:
            line = f"- **{imp.stage}:** {imp.improvement}"
            if imp.priority:
                line += f" [{imp.priority}]"
            if imp.expected_impact:
                line += f" → {imp.expected_impact}"
            out.append(line + "\n")
        out.append("\n")
    return out


_RENDERERS: dict[type[EntityBase], Callable[..., list[str]]] = {
    AidaFunnel: _render_aida,
    ContentFunnel: _render_content,
    ConversionFunnel: _render_conversion,
    CustomerJourney: _render_journey,
}


def render_entity(entity: EntityBase) -> str:
    """Markdown section for one entity, chosen by its variant."""
    return "".join(_RENDERERS[type(entity)](entity))


def render_markdown(project: Project, entities: list[EntityBase]) -> str:
    """Markdown document for a project and its already-resolved entities."""
    parts = [f"# {project.name}\n\n"]
    if project.description:
        parts.append(f"{project.description}\n\n")
    if project.tags:
        parts.append(f"**Tags:** {', '.join(project.tags)}\n\n")
    parts.append("---\n\n")
    for entity in entities:
        parts.append(render_entity(entity))
        parts.append("\n---\n\n")
    return "".join(parts)


def render_json(project: Project, entities: list[EntityBase]) -> str:
    snapshot = {
        "project": project.to_record(),
        "entities": [e.to_record() for e in entities],
    }
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


class Exporter:
    """Look up a project, resolve its entities and render them."""

    def __init__(self, projects: ProjectStore, entities: EntityStore) -> None:
        self.projects = projects
        self.entities = entities

    async def _resolve(self, project_id: str) -> tuple[Project, list[EntityBase]]:
        project = await self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project, await self.entities.list_by_project(project_id)

    async def to_json(self, project_id: str) -> str:
        return render_json(*await self._resolve(project_id))

    async def to_markdown(self, project_id: str) -> str:
        return render_markdown(*await self._resolve(project_id))

    async def export(self, project_id: str, fmt: ExportFormat | str) -> str:
        if ExportFormat(fmt) is ExportFormat.JSON:
            return await self.to_json(project_id)
        return await self.to_markdown(project_id)
