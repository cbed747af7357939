"""Signature matching for tool windows.

Each tool kind owns a fixed list of signatures. A window matches a kind when
its app_id or its legacy X11 class equals one of the signatures,
case-insensitively.
"""

from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from ..models.tool import ToolKind
from ..models.window import WindowInfo


SIGNATURES: Dict[ToolKind, Tuple[str, ...]] = {
    ToolKind.BROWSER: ("chromium", "Chromium", "chromium-browser", "Chromium-browser"),
    ToolKind.TERMINAL: ("kitty", "Kitty"),
    ToolKind.EDITOR: ("zed", "Zed", "dev.zed.Zed"),
}


def signatures_for(kind: ToolKind) -> Tuple[str, ...]:
    """Return the signature list for a tool kind."""
    return SIGNATURES[kind]


@lru_cache(maxsize=64)
def _normalized(signatures: Tuple[str, ...]) -> FrozenSet[str]:
    return frozenset(s.lower() for s in signatures)


def window_matches(window: WindowInfo, signatures: Sequence[str]) -> bool:
    """Check a window against a signature list.

    Examples:
        >>> window_matches(WindowInfo(id="1", app_id="Chromium"), ["chromium"])
        True
        >>> window_matches(WindowInfo(id="2", window_class="kitty"), ["zed"])
        False
    """
    wanted = _normalized(tuple(signatures))
    for field_value in (window.app_id, window.window_class):
        if field_value and field_value.lower() in wanted:
            return True
    return False


def matching_window_ids(windows: Iterable[WindowInfo], signatures: Sequence[str]) -> List[str]:
    """Ids of matching windows, in snapshot order, without duplicates."""
    ids: List[str] = []
    for window in windows:
        if window.id not in ids and window_matches(window, signatures):
            ids.append(window.id)
    return ids
