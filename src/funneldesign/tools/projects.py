"""Project management tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import Field

from funneldesign.models import EntityBase, EntityType, Project
from funneldesign.storage.errors import EntityNotFoundError, ProjectNotFoundError
from funneldesign.storage.export import ExportFormat
from funneldesign.tools.base import NoArgs, ToolArgs, ToolDefinition, merge_update

if TYPE_CHECKING:
    from funneldesign.storage import Storage


class CreateProjectArgs(ToolArgs):
    name: str = Field(description="Name for the project")
    description: str | None = Field(default=None, description="Optional project description")
    tags: list[str] | None = Field(default=None, description="Optional tags for organization")


class ProjectIdArgs(ToolArgs):
    project_id: str = Field(description="The project ID")


class UpdateProjectArgs(ToolArgs):
    project_id: str = Field(description="The project ID to update")
    name: str | None = Field(default=None, description="Updated name")
    description: str | None = Field(default=None, description="Updated description")
    tags: list[str] | None = Field(default=None, description="Updated tags")


class ListProjectEntitiesArgs(ToolArgs):
    project_id: str = Field(description="The project ID")
    type: EntityType | None = Field(default=None, description="Filter by entity type")


class EntityIdArgs(ToolArgs):
    entity_id: str = Field(description="The entity ID")


class ExportProjectArgs(ToolArgs):
    project_id: str = Field(description="The project ID to export")
    format: ExportFormat = Field(description="Export format")


async def create_project(storage: Storage, args: CreateProjectArgs) -> Project:
    return await storage.projects.create(args.name, args.description, args.tags)


async def get_project(storage: Storage, args: ProjectIdArgs) -> dict[str, Any]:
    project = await storage.projects.get(args.project_id)
    if project is None:
        raise ProjectNotFoundError(args.project_id)
    entities = await storage.entities.list_by_project(args.project_id)
    return {"project": project, "entities": entities}


async def update_project(storage: Storage, args: UpdateProjectArgs) -> Project:
    existing = await storage.projects.get(args.project_id)
    if existing is None:
        raise ProjectNotFoundError(args.project_id)
    return await storage.projects.update(merge_update(existing, args, exclude={"project_id"}))


async def delete_project(storage: Storage, args: ProjectIdArgs) -> dict[str, Any]:
    success = await storage.projects.delete(args.project_id)
    return {
        "success": success,
        "message": (
            f"Project {args.project_id} and all its entities deleted"
            if success
            else f"Project {args.project_id} not found"
        ),
    }


async def list_projects(storage: Storage, args: NoArgs) -> list[Project]:
    return await storage.projects.list()


async def list_project_entities(
    storage: Storage, args: ListProjectEntitiesArgs
) -> list[EntityBase]:
    if args.type:
        return await storage.entities.list_by_type(args.project_id, args.type)
    return await storage.entities.list_by_project(args.project_id)


async def get_entity(storage: Storage, args: EntityIdArgs) -> EntityBase:
    entity = await storage.entities.get(args.entity_id)
    if entity is None:
        raise EntityNotFoundError(args.entity_id)
    return entity


async def delete_entity(storage: Storage, args: EntityIdArgs) -> dict[str, Any]:
    success = await storage.entities.delete(args.entity_id)
    return {
        "success": success,
        "message": (
            f"Entity {args.entity_id} deleted" if success else f"Entity {args.entity_id} not found"
        ),
    }


async def export_project(storage: Storage, args: ExportProjectArgs) -> str:
    return await storage.exporter.export(args.project_id, args.format)


PROJECT_TOOLS = [
    ToolDefinition(
        "create_project",
        "Create a new funnel design project to organize your marketing funnels",
        CreateProjectArgs,
        create_project,
    ),
    ToolDefinition(
        "get_project", "Get a project with all its funnel entities", ProjectIdArgs, get_project
    ),
    ToolDefinition(
        "update_project",
        "Update project name, description, or tags",
        UpdateProjectArgs,
        update_project,
    ),
    ToolDefinition(
        "delete_project", "Delete a project and all its funnels", ProjectIdArgs, delete_project
    ),
    ToolDefinition("list_projects", "List all funnel design projects", NoArgs, list_projects),
    ToolDefinition(
        "list_project_entities",
        "List all funnels in a project, optionally filtered by type",
        ListProjectEntitiesArgs,
        list_project_entities,
    ),
    ToolDefinition("get_entity", "Get any funnel entity by ID", EntityIdArgs, get_entity),
    ToolDefinition("delete_entity", "Delete any funnel entity by ID", EntityIdArgs, delete_entity),
    ToolDefinition(
        "export_project",
        "Export a project to JSON or Markdown format",
        ExportProjectArgs,
        export_project,
    ),
]
