"""Tool definitions shared by every tool module."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, ValidationError

from funneldesign.models.base import FunnelModel
from funneldesign.storage.errors import InvalidDataError

if TYPE_CHECKING:
    from funneldesign.storage import Storage

ToolHandler = Callable[["Storage", Any], Awaitable[Any]]


class ToolArgs(FunnelModel):
    """Base for tool argument models (camelCase on the wire)."""

    model_config = ConfigDict(extra="ignore")


class NoArgs(ToolArgs):
    pass


@dataclass
class ToolDefinition:
    """A tool exposed to the assistant, backed by the store."""

    name: str
    description: str
    args_model: type[ToolArgs]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        return self.args_model.model_json_schema(by_alias=True)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def parse_args(self, raw: dict[str, Any] | None) -> ToolArgs:
        try:
            return self.args_model.model_validate(raw or {})
        except ValidationError as e:
            raise InvalidDataError(f"Invalid arguments for {self.name}: {e}", e) from e

    async def call(self, storage: Storage, raw: dict[str, Any] | None) -> Any:
        return await self.handler(storage, self.parse_args(raw))


def to_jsonable(value: Any) -> Any:
    """Convert models (possibly nested in lists/dicts) to plain JSON data."""
    if isinstance(value, FunnelModel):
        return value.to_record()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def merge_update(existing: FunnelModel, args: ToolArgs, *, exclude: set[str]) -> Any:
    """Copy ``existing`` with every supplied (non-None) argument applied."""
    changes = {name: value for name, value in args if value is not None and name not in exclude}
    return existing.model_copy(update=changes)
