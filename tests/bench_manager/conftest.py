"""Pytest configuration and shared fixtures for bench_manager tests."""

from typing import Dict, List

import pytest

from bench_manager.core.bench import BenchManager
from bench_manager.core.config import BenchConfig
from bench_manager.core.persistence import BenchRepository
from bench_manager.core.resolver import ToolResolver
from bench_manager.models.bench import BaySpec, Bench
from bench_manager.models.tool import ToolDefinition, ToolKind

from .fixtures.fakes import FakeLauncher, FakeSway, MemoryStore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.config/bench and ~/.local/share/bench."""
    monkeypatch.setenv("BENCH_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("BENCH_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def config(tmp_path) -> BenchConfig:
    """Fast-polling config rooted in a temp directory."""
    return BenchConfig(data_dir=tmp_path / "data", launch_timeout=0.5, poll_interval=0.01)


@pytest.fixture
def sway() -> FakeSway:
    return FakeSway()


@pytest.fixture
def launcher(sway: FakeSway) -> FakeLauncher:
    return FakeLauncher(sway)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(store: MemoryStore) -> BenchRepository:
    return BenchRepository(store)


@pytest.fixture
def resolver(sway, launcher, repository, config) -> ToolResolver:
    return ToolResolver(
        sway,
        launcher,
        repository,
        launch_timeout=config.launch_timeout,
        poll_interval=config.poll_interval,
    )


@pytest.fixture
def manager(config, sway, launcher, store) -> BenchManager:
    return BenchManager(config, window_manager=sway, launcher=launcher, store=store)


@pytest.fixture
def declare(repository: BenchRepository):
    """Write tool definitions and a bench in one call.

    Examples:
        declare("work", {"1": ["docs", "shell"]}, kinds={"docs": "browser"})
    """

    def _declare(bench_name: str, bays: Dict[str, List[str]], kinds: Dict[str, str] = None) -> Bench:
        kinds = kinds or {}
        for tool_names in bays.values():
            for tool_name in tool_names:
                if not repository.tool_exists(tool_name):
                    kind = ToolKind(kinds.get(tool_name, "terminal"))
                    repository.write_tool(ToolDefinition(name=tool_name, kind=kind))
        bench = Bench(
            name=bench_name,
            bays=[BaySpec(name=bay, tool_names=list(names)) for bay, names in bays.items()],
        )
        repository.write_bench(bench)
        return bench

    return _declare
