"""Tests for tool resolution and launch-and-wait."""

import pytest

from bench_manager.core.endpoints import stable_endpoint
from bench_manager.core.errors import LaunchError, LaunchTimeoutError, NotFoundError
from bench_manager.core.resolver import ToolResolver, is_live
from bench_manager.models.assembly import AssembledTool
from bench_manager.models.tool import ToolDefinition, ToolKind

from ..fixtures.fakes import FakeLauncher, FakeSway


def _tool(repository, name="shell", kind=ToolKind.TERMINAL, **state) -> ToolDefinition:
    tool = ToolDefinition(name=name, kind=kind, state=state or None)
    repository.write_tool(tool)
    return tool


class TestTrackedWindow:
    """Step 1: a live tracked window wins."""

    @pytest.mark.asyncio
    async def test_tracked_precedence(self, resolver, repository, sway, launcher, store):
        """Other matching windows and the launcher are never consulted."""
        _tool(repository)
        sway.add_window("kitty", "1", window_id="10")
        sway.add_window("kitty", "3", window_id="50")
        repository.write_assembled_tool("shell", AssembledTool(window_id="50"))
        store.writes.clear()

        resolution = await resolver.resolve("shell", "1")

        assert resolution.window_id == "50"
        assert resolution.tracked is True
        assert resolution.launched is False
        assert launcher.calls == []
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_tracked_ignores_exclude(self, resolver, repository, sway):
        _tool(repository)
        sway.add_window("kitty", "1", window_id="10")
        repository.write_assembled_tool("shell", AssembledTool(window_id="10"))
        resolution = await resolver.resolve("shell", "1", exclude={"10"})
        assert resolution.window_id == "10"

    @pytest.mark.asyncio
    async def test_stale_record_dropped_then_rediscovered(self, resolver, repository, sway):
        _tool(repository)
        sway.add_window("kitty", "1", window_id="11")
        repository.write_assembled_tool("shell", AssembledTool(window_id="99"))

        resolution = await resolver.resolve("shell", "1")

        assert resolution.window_id == "11"
        assert resolution.tracked is False
        assert repository.read_assembled_tool("shell").window_id == "11"


class TestPatternMatch:
    """Step 2: first matching window in window manager order."""

    @pytest.mark.asyncio
    async def test_first_match_persisted(self, resolver, repository, sway, launcher):
        _tool(repository)
        sway.add_window("firefox", "1", window_id="5")
        sway.add_window("kitty", "2", window_id="7")
        sway.add_window("Kitty", "1", window_id="6")

        resolution = await resolver.resolve("shell", "1")

        assert resolution.window_id == "7"
        assert resolution.launched is False
        assert launcher.calls == []
        assert repository.read_assembled_tool("shell").window_id == "7"

    @pytest.mark.asyncio
    async def test_claimed_windows_skipped(self, resolver, repository, sway):
        _tool(repository)
        sway.add_window("kitty", "1", window_id="7")
        sway.add_window("kitty", "1", window_id="8")
        resolution = await resolver.resolve("shell", "1", exclude={"7"})
        assert resolution.window_id == "8"


class TestLaunch:
    """Step 3: launch and wait for a new window."""

    @pytest.mark.asyncio
    async def test_launch_when_nothing_matches(self, resolver, repository, sway, launcher):
        _tool(repository, cwd="~/src")
        sway.add_window("chromium", "1", window_id="3")

        resolution = await resolver.resolve("shell", "2")

        assert resolution.launched is True
        assert resolution.window_id == launcher.opened[0]
        assert launcher.calls[0].kind == ToolKind.TERMINAL
        assert launcher.calls[0].state.cwd == "~/src"
        assert launcher.calls[0].debug_endpoint is None
        assert repository.read_assembled_tool("shell").window_id == resolution.window_id

    @pytest.mark.asyncio
    async def test_browser_gets_stable_endpoint(self, resolver, repository, launcher):
        _tool(repository, name="docs", kind=ToolKind.BROWSER, urls=["https://a"])
        await resolver.resolve("docs", "1")
        assert launcher.calls[0].debug_endpoint == stable_endpoint("docs", 9222, 1000)
        assert launcher.calls[0].state.urls == ["https://a"]

    @pytest.mark.asyncio
    async def test_missing_tool_names_tool_and_bay(self, resolver):
        with pytest.raises(NotFoundError, match="Tool 'ghost' \\(bay 'web'\\)"):
            await resolver.resolve("ghost", "web")

    @pytest.mark.asyncio
    async def test_launcher_failure(self, sway, repository):
        _tool(repository)
        resolver = ToolResolver(sway, FakeLauncher(sway, fail=True), repository, launch_timeout=0.1, poll_interval=0.01)
        with pytest.raises(LaunchError, match="Tool 'shell'"):
            await resolver.resolve("shell", "1")
        assert repository.read_assembled_tool("shell") is None


class TestLaunchAndWait:
    """Tests for the polling-by-diff protocol."""

    @pytest.mark.asyncio
    async def test_never_returns_preexisting_window(self, sway, repository):
        """The launched app's window shows up after a few polls next to an old one."""
        tool = _tool(repository)
        sway.add_window("kitty", "1", window_id="1")
        launcher = FakeLauncher(sway, appear_after=3)
        resolver = ToolResolver(sway, launcher, repository, launch_timeout=1.0, poll_interval=0.01)

        window_id = await resolver.launch_and_wait(tool, "1")

        assert window_id != "1"
        assert window_id == launcher.opened[0]

    @pytest.mark.asyncio
    async def test_reused_window_is_not_accepted(self, sway, repository):
        """An app that raises its existing window instead of opening one times out."""
        tool = _tool(repository)
        sway.add_window("kitty", "1", window_id="1")
        resolver = ToolResolver(sway, FakeLauncher(sway, appear_after=None), repository, poll_interval=0.01)

        with pytest.raises(LaunchTimeoutError):
            await resolver.launch_and_wait(tool, "1", timeout=0.05)

    @pytest.mark.asyncio
    async def test_timeout_writes_no_record(self, sway, repository):
        _tool(repository)
        launcher = FakeLauncher(sway, appear_after=None)
        resolver = ToolResolver(sway, launcher, repository, launch_timeout=0.05, poll_interval=0.01)

        with pytest.raises(LaunchTimeoutError) as excinfo:
            await resolver.resolve("shell", "1")

        message = str(excinfo.value)
        assert "Tool 'shell'" in message
        assert "timed out" in message
        assert "waiting for new window for signatures: kitty, Kitty" in message
        assert isinstance(excinfo.value, TimeoutError)
        assert repository.read_assembled_tool("shell") is None
        assert len(launcher.calls) == 1

    @pytest.mark.asyncio
    async def test_other_kinds_do_not_count(self, sway, repository):
        tool = _tool(repository)
        launcher = FakeLauncher(sway, appear_after=None)
        resolver = ToolResolver(sway, launcher, repository, poll_interval=0.01)
        sway.add_window("chromium", "1")
        with pytest.raises(LaunchTimeoutError):
            await resolver.launch_and_wait(tool, "1", timeout=0.05)


class TestIsLive:
    """Tests for the tolerant liveness check."""

    @pytest.mark.asyncio
    async def test_query_failure_counts_as_gone(self, sway):
        sway.add_window("kitty", "1", window_id="1")
        sway.fail_snapshots = 1
        assert await is_live(sway, "1") is False
        assert await is_live(sway, "1") is True
