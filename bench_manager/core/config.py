"""Configuration for bench.

Settings are read from ~/.config/bench/config.json (or $BENCH_CONFIG).
A missing file means defaults; $BENCH_DATA_DIR overrides the data directory.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..models.window import SCRATCHPAD_WORKSPACE
from .errors import ParseError


def default_data_dir() -> Path:
    """$XDG_DATA_HOME/bench, falling back to ~/.local/share/bench."""
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local/share"
    return base / "bench"


def default_config_file() -> Path:
    env = os.environ.get("BENCH_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".config/bench/config.json"


class BenchConfig(BaseModel):
    """Runtime settings.

    Attributes:
        data_dir: Root directory of the JSON record store
        launch_timeout: Seconds to wait for a launched tool's window
        poll_interval: Seconds between window polls while waiting
        holding_workspace: Where stowed windows go ("__i3_scratch" = scratchpad)
        endpoint_base: First debugging port handed to browser tools
        endpoint_span: Number of ports in the debugging port range
        browser_command: Chromium executable
        terminal_command: Terminal executable
        editor_command: Editor executable
        devtools_timeout: Seconds allowed for a DevTools tab listing
    """

    data_dir: Path = Field(default_factory=default_data_dir)
    launch_timeout: float = Field(15.0, gt=0)
    poll_interval: float = Field(0.15, gt=0)
    holding_workspace: str = SCRATCHPAD_WORKSPACE
    endpoint_base: int = Field(9222, ge=1, le=65535)
    endpoint_span: int = Field(1000, ge=1)
    browser_command: str = "chromium"
    terminal_command: str = "kitty"
    editor_command: str = "zed"
    devtools_timeout: float = Field(0.8, gt=0)

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "BenchConfig":
        """Load settings from disk.

        Raises:
            ParseError: If the file exists but is not a valid config
        """
        if config_file is None:
            config_file = default_config_file()

        data = {}
        if config_file.exists():
            try:
                with config_file.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError, IOError) as e:
                raise ParseError(f"Failed to load config {config_file}: {e}")
            if not isinstance(data, dict):
                raise ParseError(f"Config {config_file} must be a JSON object")

        env_data_dir = os.environ.get("BENCH_DATA_DIR")
        if env_data_dir:
            data["data_dir"] = env_data_dir

        try:
            return cls(**data)
        except ValidationError as e:
            raise ParseError(f"Invalid config {config_file}: {e}")
