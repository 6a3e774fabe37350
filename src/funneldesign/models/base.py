"""Shared pydantic base for stored records."""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Whole numbers stay ints so stored files round-trip unchanged
Percent = Union[
    Annotated[int, Field(ge=0, le=100)],
    Annotated[float, Field(ge=0, le=100)],
]


class FunnelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on disk and on the wire.

    Keys the model does not declare are kept as-is, so records written by
    other tools or by hand survive a read and rewrite unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys and absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
