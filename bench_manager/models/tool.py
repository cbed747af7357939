"""Tool definition models.

A tool is a declared application instance: a kind (browser, terminal,
editor) plus kind-specific state used when the tool has to be launched.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class ToolKind(str, Enum):
    """Closed set of launchable application kinds."""

    BROWSER = "browser"
    TERMINAL = "terminal"
    EDITOR = "editor"


class BrowserState(BaseModel):
    """Chromium window state: URLs opened on launch."""

    urls: List[str] = Field(default_factory=list)


class TerminalState(BaseModel):
    """Terminal state: working directory and optional command."""

    cwd: Optional[str] = None
    command: List[str] = Field(default_factory=list)


class EditorState(BaseModel):
    """Editor state: path to open."""

    path: Optional[str] = None


ToolState = Union[BrowserState, TerminalState, EditorState]

STATE_MODELS = {
    ToolKind.BROWSER: BrowserState,
    ToolKind.TERMINAL: TerminalState,
    ToolKind.EDITOR: EditorState,
}


def default_state(kind: ToolKind) -> ToolState:
    """Return the empty state for a tool kind."""
    return STATE_MODELS[kind]()


class ToolDefinition(BaseModel):
    """Declared tool, persisted under the 'tool' record kind.

    Examples:
        >>> tool = ToolDefinition(name="docs", kind="browser", state={"urls": ["https://docs.python.org"]})
        >>> tool.state.urls
        ['https://docs.python.org']
        >>> ToolDefinition(name="shell", kind="terminal").launch_state()
        TerminalState(cwd=None, command=[])
    """

    name: str = Field(..., min_length=1, description="Unique, user-chosen tool name")
    kind: ToolKind
    state: Optional[ToolState] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Tool name cannot be blank")
        return v

    @model_validator(mode="before")
    @classmethod
    def coerce_state(cls, data):
        """Parse raw state dicts with the model matching the tool kind."""
        if not isinstance(data, dict):
            return data
        state = data.get("state")
        if state is None or "kind" not in data:
            return data
        try:
            kind = ToolKind(data["kind"])
        except ValueError:
            return data
        model = STATE_MODELS[kind]
        if isinstance(state, dict):
            data = {**data, "state": model.model_validate(state)}
        elif not isinstance(state, model):
            raise ValueError(
                f"State {type(state).__name__} does not match tool kind '{kind.value}'"
            )
        return data

    def launch_state(self) -> ToolState:
        """State used for launching, falling back to the kind's defaults."""
        return self.state if self.state is not None else default_state(self.kind)
