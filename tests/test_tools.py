"""Tests for the MCP tool handlers."""

from __future__ import annotations

import asyncio
import pytest
from pathlib import Path

from funneldesign.storage import (
    EntityNotFoundError,
    InvalidDataError,
    ProjectNotFoundError,
    Storage,
    StorageErrorCode,
)
from funneldesign.tools import get_funnel_tools, to_jsonable


@pytest.fixture
def storage(tmp_path: Path) -> Storage:
    return Storage(tmp_path / "funnel-data")


@pytest.fixture
def tools():
    return get_funnel_tools()


async def call(tools, storage, name, /, **arguments):
    return await tools[name].call(storage, arguments)


STAGES = [
    {"name": "Awareness", "conversionRate": 50},
    {"name": "Interest", "conversionRate": 30},
]


class TestRegistry:
    def test_tool_names(self, tools):
        assert set(tools) == {
            "create_project", "get_project", "update_project", "delete_project",
            "list_projects", "list_project_entities", "get_entity", "delete_entity",
            "export_project",
            "create_aida_funnel", "update_aida_funnel",
            "create_content_funnel", "update_content_funnel",
            "create_conversion_funnel", "update_conversion_funnel",
            "create_customer_journey", "update_customer_journey",
            "populate_framework",
        }

    def test_schemas_use_camel_case(self, tools):
        schema = tools["create_conversion_funnel"].input_schema()
        assert "projectId" in schema["properties"]
        assert "trafficSources" in schema["properties"]
        assert set(schema["required"]) == {"projectId", "name", "stages"}

    def test_describe(self, tools):
        described = tools["list_projects"].describe()
        assert described["name"] == "list_projects"
        assert described["inputSchema"]["type"] == "object"


class TestProjectTools:
    @pytest.mark.asyncio
    async def test_create_and_get(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Demo", tags=["t"])
        result = await call(tools, storage, "get_project", projectId=project.id)
        assert result["project"].name == "Demo"
        assert result["entities"] == []

    @pytest.mark.asyncio
    async def test_get_missing(self, tools, storage):
        with pytest.raises(ProjectNotFoundError):
            await call(tools, storage, "get_project", projectId="missing-id")

    @pytest.mark.asyncio
    async def test_update_merges_partial_fields(self, tools, storage):
        project = await call(tools, storage, "create_project",
                             name="Original", description="Keep me", tags=["a"])
        updated = await call(tools, storage, "update_project", projectId=project.id, name="New")

        assert updated.name == "New"
        assert updated.description == "Keep me"
        assert updated.tags == ["a"]
        assert updated.created_at == project.created_at

    @pytest.mark.asyncio
    async def test_update_preserves_entity_refs(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Refs")
        await call(tools, storage, "create_conversion_funnel",
                   projectId=project.id, name="F", stages=STAGES)
        updated = await call(tools, storage, "update_project", projectId=project.id, tags=["x"])
        assert len(updated.entities) == 1

    @pytest.mark.asyncio
    async def test_update_missing(self, tools, storage):
        with pytest.raises(ProjectNotFoundError):
            await call(tools, storage, "update_project", projectId="nope", name="X")

    @pytest.mark.asyncio
    async def test_delete(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Gone")
        result = await call(tools, storage, "delete_project", projectId=project.id)
        assert result == {
            "success": True,
            "message": f"Project {project.id} and all its entities deleted",
        }
        again = await call(tools, storage, "delete_project", projectId=project.id)
        assert again["success"] is False
        assert "not found" in again["message"]

    @pytest.mark.asyncio
    async def test_list_projects(self, tools, storage):
        await call(tools, storage, "create_project", name="One")
        await asyncio.sleep(0.01)
        await call(tools, storage, "create_project", name="Two")
        projects = await call(tools, storage, "list_projects")
        assert [p.name for p in projects] == ["Two", "One"]

    @pytest.mark.asyncio
    async def test_list_project_entities_filter(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Filter")
        await call(tools, storage, "create_conversion_funnel",
                   projectId=project.id, name="Conv", stages=STAGES)
        await call(tools, storage, "create_customer_journey", projectId=project.id, name="Journey",
                   stages=[{"name": "S", "customerGoal": "G", "touchpoints": []}])

        everything = await call(tools, storage, "list_project_entities", projectId=project.id)
        journeys = await call(tools, storage, "list_project_entities",
                              projectId=project.id, type="customer-journey")
        assert len(everything) == 2
        assert [e.name for e in journeys] == ["Journey"]

    @pytest.mark.asyncio
    async def test_get_and_delete_entity(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Entities")
        entity = await call(tools, storage, "create_conversion_funnel",
                            projectId=project.id, name="F", stages=STAGES)

        fetched = await call(tools, storage, "get_entity", entityId=entity.id)
        assert fetched.id == entity.id

        result = await call(tools, storage, "delete_entity", entityId=entity.id)
        assert result["success"] is True
        with pytest.raises(EntityNotFoundError) as exc_info:
            await call(tools, storage, "get_entity", entityId=entity.id)
        assert exc_info.value.code == StorageErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_export(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Export Test")
        await call(tools, storage, "create_conversion_funnel",
                   projectId=project.id, name="F", stages=STAGES)
        md = await call(tools, storage, "export_project", projectId=project.id, format="markdown")
        assert "# Export Test" in md
        assert "Awareness" in md

    @pytest.mark.asyncio
    async def test_export_bad_format(self, tools, storage):
        with pytest.raises(InvalidDataError):
            await call(tools, storage, "export_project", projectId="p", format="pdf")


class TestFunnelTools:
    @pytest.mark.asyncio
    async def test_create_aida(self, tools, storage):
        project = await call(tools, storage, "create_project", name="AIDA")
        entity = await call(
            tools, storage, "create_aida_funnel",
            projectId=project.id,
            name="Launch",
            attention={"channels": [{"channel": "Email"}]},
            interest={"contentTypes": [{"type": "Demo video"}]},
            desire={"benefits": [{"benefit": "Less churn"}]},
            action={"primaryCta": {"text": "Sign up"}},
        )
        assert entity.type == "aida-funnel"
        assert entity.action.primary_cta.text == "Sign up"
        stored = await storage.projects.get(project.id)
        assert stored.entities[0].id == entity.id

    @pytest.mark.asyncio
    async def test_create_content(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Content")
        entity = await call(
            tools, storage, "create_content_funnel",
            projectId=project.id,
            name="Inbound",
            tofu={"goal": "Reach", "contentTypes": []},
            mofu={"goal": "Nurture", "contentTypes": []},
            bofu={"goal": "Close", "contentTypes": []},
        )
        assert entity.type == "content-funnel"
        assert entity.bofu.goal == "Close"

    @pytest.mark.asyncio
    async def test_create_missing_project(self, tools, storage):
        with pytest.raises(ProjectNotFoundError, match="missing-id"):
            await call(tools, storage, "create_conversion_funnel",
                       projectId="missing-id", name="F", stages=STAGES)

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, tools, storage):
        with pytest.raises(InvalidDataError) as exc_info:
            await call(tools, storage, "create_conversion_funnel", projectId="p", name="F")
        assert exc_info.value.code == StorageErrorCode.INVALID_DATA
        assert exc_info.value.is_expected()

    @pytest.mark.asyncio
    async def test_update_merges(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Update")
        entity = await call(tools, storage, "create_conversion_funnel",
                            projectId=project.id, name="Before", description="Keep",
                            stages=STAGES)
        await asyncio.sleep(0.01)

        updated = await call(tools, storage, "update_conversion_funnel",
                             entityId=entity.id, name="After",
                             bottlenecks=[{"stage": "Interest", "issue": "Slow demo"}])

        assert updated.name == "After"
        assert updated.description == "Keep"
        assert [s.name for s in updated.stages] == ["Awareness", "Interest"]
        assert updated.bottlenecks[0].issue == "Slow demo"
        assert updated.updated_at > entity.updated_at

        stored = await storage.entities.get(entity.id)
        assert stored.name == "After"
        assert stored.project_id == project.id

    @pytest.mark.asyncio
    async def test_update_missing(self, tools, storage):
        with pytest.raises(EntityNotFoundError, match="Conversion Funnel nope not found"):
            await call(tools, storage, "update_conversion_funnel", entityId="nope", name="X")

    @pytest.mark.asyncio
    async def test_update_wrong_variant(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Variant")
        entity = await call(tools, storage, "create_conversion_funnel",
                            projectId=project.id, name="F", stages=STAGES)
        with pytest.raises(EntityNotFoundError):
            await call(tools, storage, "update_customer_journey", entityId=entity.id, name="X")


class TestPopulateFramework:
    CITATION = {
        "id": "c1",
        "title": "Funnel benchmarks",
        "url": "https://example.com/benchmarks",
        "accessedAt": "2025-01-01T00:00:00.000Z",
        "relevantFields": ["stages"],
    }

    @pytest.mark.asyncio
    async def test_conversion(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Research")
        result = await call(
            tools, storage, "populate_framework",
            projectId=project.id,
            frameworkType="conversion-funnel",
            name="Researched",
            researchData={"stages": [{"name": "Visit", "conversionRate": 3.2}]},
            citations=[self.CITATION],
            researchModel="deep-research",
            confidence=80,
        )

        assert result["type"] == "conversion-funnel"
        assert result["citationCount"] == 1
        entity = await storage.entities.get(result["entityId"])
        assert entity.stages[0].conversion_rate == 3.2
        assert entity.research_metadata.confidence == 80
        assert entity.research_metadata.research_model == "deep-research"
        assert entity.research_metadata.researched_at
        assert entity.research_metadata.citations[0].url == "https://example.com/benchmarks"

    @pytest.mark.asyncio
    async def test_aida_defaults(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Research")
        result = await call(
            tools, storage, "populate_framework",
            projectId=project.id, frameworkType="aida-funnel", name="Sparse",
            researchData={}, citations=[],
        )
        entity = await storage.entities.get(result["entityId"])
        assert entity.action.primary_cta.text == "Get Started"
        assert entity.attention.channels == []
        assert entity.research_metadata.confidence is None

    @pytest.mark.asyncio
    async def test_content_defaults(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Research")
        result = await call(
            tools, storage, "populate_framework",
            projectId=project.id, frameworkType="content-funnel", name="Sparse",
            researchData={"mofu": {"goal": "Educate"}}, citations=[],
        )
        entity = await storage.entities.get(result["entityId"])
        assert entity.tofu.goal == "Generate awareness"
        assert entity.mofu.goal == "Educate"
        assert entity.bofu.goal == "Convert leads"

    @pytest.mark.asyncio
    async def test_malformed_research_data(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Research")
        with pytest.raises(InvalidDataError):
            await call(
                tools, storage, "populate_framework",
                projectId=project.id, frameworkType="customer-journey", name="Bad",
                researchData={"stages": [{"name": "No goal"}]}, citations=[],
            )
        assert (await storage.projects.get(project.id)).entities == []


class TestToJsonable:
    @pytest.mark.asyncio
    async def test_nested_models(self, tools, storage):
        project = await call(tools, storage, "create_project", name="Nested")
        result = await call(tools, storage, "get_project", projectId=project.id)
        data = to_jsonable(result)
        assert data["project"]["createdAt"] == project.created_at
        assert data["entities"] == []
