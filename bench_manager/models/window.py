"""Live window snapshot model."""

from dataclasses import dataclass
from typing import Optional

# sway/i3 name for the scratchpad workspace
SCRATCHPAD_WORKSPACE = "__i3_scratch"


@dataclass(frozen=True)
class WindowInfo:
    """One window from a window manager tree snapshot.

    Attributes:
        id: Container id (string form)
        app_id: Wayland app_id, if any
        window_class: X11 WM_CLASS class, if any (XWayland/i3)
        title: Window title
        workspace: Name of the enclosing workspace, None for unmanaged windows
    """

    id: str
    app_id: Optional[str] = None
    window_class: Optional[str] = None
    title: Optional[str] = None
    workspace: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "app_id": self.app_id,
            "window_class": self.window_class,
            "title": self.title,
            "workspace": self.workspace,
        }
