from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class GraphBaseModel(BaseModel):
    """Base class for snapshot records shaped like Graph payloads."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def from_graph(cls, payload: dict[str, Any]) -> Self:
        """Hydrate a model from a raw Graph-style payload."""
        return cls.model_validate(payload)

    def to_graph(self) -> dict[str, Any]:
        """Serialize back to camelCase aliases."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            serialize_as_any=True,
        )


class GraphResource(GraphBaseModel):
    """Shared identifier for Graph resources."""

    id: str = Field(alias="id")


def odata_suffix(odata_type: str | None) -> str | None:
    """Return the trailing type name of an ``@odata.type`` value.

    ``#microsoft.graph.win32LobApp`` becomes ``win32LobApp``.
    """

    if not odata_type:
        return None
    return odata_type.rsplit(".", maxsplit=1)[-1].lstrip("#") or None


__all__ = ["GraphBaseModel", "GraphResource", "odata_suffix"]
