"""Window index built from one window manager tree snapshot.

The index maps window id -> WindowInfo and is rebuilt
on every reconciliation pass. Nothing is cached between passes.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from ..models.window import WindowInfo
from .errors import ParseError

logger = logging.getLogger("bench.window_index")


def collect_windows(tree: Mapping[str, Any]) -> List[WindowInfo]:
    """Flatten a sway/i3 GET_TREE payload into WindowInfo records.

    Windows outside any workspace (e.g. unmanaged) get workspace=None.

    Raises:
        ParseError: If the tree is not a node mapping or a window node has no integer id
    """
    windows: List[WindowInfo] = []
    _collect(tree, None, windows)
    return windows


def _collect(node: Any, workspace: Optional[str], out: List[WindowInfo]) -> None:
    if not isinstance(node, Mapping):
        raise ParseError(f"Malformed window tree node: {type(node).__name__}")

    if node.get("type") == "workspace":
        name = node.get("name")
        workspace = str(name) if name is not None else None

    if _is_window(node):
        node_id = node.get("id")
        if not isinstance(node_id, int) or isinstance(node_id, bool):
            raise ParseError(f"Window node without integer id: {node.get('name')!r}")
        properties = node.get("window_properties") or {}
        out.append(
            WindowInfo(
                id=str(node_id),
                app_id=node.get("app_id"),
                window_class=properties.get("class") if isinstance(properties, Mapping) else None,
                title=node.get("name"),
                workspace=workspace,
            )
        )

    for key in ("nodes", "floating_nodes"):
        children = node.get(key) or []
        if not isinstance(children, list):
            raise ParseError(f"Malformed window tree: '{key}' is not a list")
        for child in children:
            _collect(child, workspace, out)


def _is_window(node: Mapping[str, Any]) -> bool:
    return bool(node.get("app_id") or node.get("window") or node.get("window_properties"))


class WindowIndex:
    """Window id -> WindowInfo map for a single snapshot.

    Examples:
        >>> index = WindowIndex([WindowInfo(id="7", app_id="kitty", workspace="2")])
        >>> index.workspace_of("7")
        '2'
    """

    def __init__(self, windows: Sequence[WindowInfo]):
        self._windows: Dict[str, WindowInfo] = {}
        for window in windows:
            self._windows[window.id] = window
        self._order = list(self._windows)

    @classmethod
    async def capture(cls, window_manager) -> "WindowIndex":
        """Query the window manager once and index the result."""
        windows = await window_manager.snapshot()
        logger.debug(f"Indexed {len(windows)} window(s)")
        return cls(windows)

    def __contains__(self, window_id: object) -> bool:
        return window_id in self._windows

    def __iter__(self) -> Iterator[WindowInfo]:
        return (self._windows[window_id] for window_id in self._order)

    def __len__(self) -> int:
        return len(self._windows)

    def workspace_of(self, window_id: str) -> Optional[str]:
        window = self._windows.get(window_id)
        return window.workspace if window else None
