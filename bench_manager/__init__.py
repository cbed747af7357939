"""Bench - sway bench/bay/tool manager.

This package provides:
- Declarative benches made of bays (workspaces) and tools (applications)
- Reconciliation of declared tools against live sway windows
- Durable tool-to-window tracking across restarts
- Stow/focus of whole benches via the scratchpad
- Layout drift detection between saved and live workspace state
"""

__version__ = "0.4.0"
__author__ = "bench contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
