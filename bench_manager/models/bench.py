"""Bench and bay declaration models."""

from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class BaySpec(BaseModel):
    """A named workspace slot and the tools assigned to it.

    The bay name is used verbatim as the sway workspace name. Tool names are
    only checked against tool definitions when the bay is resolved.
    """

    name: str = Field(..., min_length=1)
    tool_names: List[str] = Field(default_factory=list)

    @field_validator("tool_names")
    @classmethod
    def validate_unique_tools(cls, v: List[str]) -> List[str]:
        seen = set()
        for tool_name in v:
            if tool_name in seen:
                raise ValueError(f"Tool '{tool_name}' listed twice in the same bay")
            seen.add(tool_name)
        return v


class Bench(BaseModel):
    """Declared set of bays, persisted under the 'bench' record kind."""

    name: str = Field(..., min_length=1)
    bays: List[BaySpec] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    last_focused_at: Optional[datetime] = None

    @field_validator("bays")
    @classmethod
    def validate_unique_bays(cls, v: List[BaySpec]) -> List[BaySpec]:
        names = [bay.name for bay in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate bay names: {', '.join(duplicates)}")
        return v

    def get_bay(self, name: str) -> Optional[BaySpec]:
        for bay in self.bays:
            if bay.name == name:
                return bay
        return None

    def bay_names(self) -> List[str]:
        return [bay.name for bay in self.bays]

    def iter_tools(self) -> Iterator[Tuple[BaySpec, str]]:
        """Yield (bay, tool_name) pairs in declaration order."""
        for bay in self.bays:
            for tool_name in bay.tool_names:
                yield bay, tool_name

    def tool_names(self) -> List[str]:
        """Distinct tool names across all bays, first occurrence order."""
        names: List[str] = []
        for _, tool_name in self.iter_tools():
            if tool_name not in names:
                names.append(tool_name)
        return names
