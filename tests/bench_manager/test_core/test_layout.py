"""Tests for stow/focus/placement and layout diffing."""

import pytest

from bench_manager.core.layout import (
    LayoutOperations,
    capture_layout,
    diff_layouts,
    prune_snapshot,
    windows_to_stow,
)
from bench_manager.core.window_index import WindowIndex
from bench_manager.models.assembly import AssembledBench
from bench_manager.models.bench import BaySpec, Bench


@pytest.fixture
def layout(sway) -> LayoutOperations:
    return LayoutOperations(sway)


class TestDiffLayouts:
    """Tests for diff_layouts()."""

    def test_added_and_removed(self):
        old = AssembledBench(bay_windows={"A": ["w1", "w2"]})
        new = AssembledBench(bay_windows={"A": ["w2", "w3"]})

        diff = diff_layouts(old, new, bench="work")

        assert diff.bench == "work"
        assert diff.added_windows == [("A", "w3")]
        assert diff.removed_windows == [("A", "w1")]

    def test_moved_between_workspaces(self):
        old = AssembledBench(bay_windows={"1": ["7"]})
        new = AssembledBench(bay_windows={"2": ["7"]})

        diff = diff_layouts(old, new)

        assert diff.added_windows == [("2", "7")]
        assert diff.removed_windows == [("1", "7")]

    def test_identical_is_empty(self):
        snapshot = AssembledBench(bay_windows={"1": ["7", "8"]})
        assert diff_layouts(snapshot, snapshot).is_empty


class TestCaptureLayout:
    """Tests for capture_layout()."""

    @pytest.mark.asyncio
    async def test_groups_by_workspace_without_holding(self, sway):
        sway.add_window("kitty", "1", window_id="1")
        sway.add_window("chromium", "web", window_id="2")
        sway.add_window("kitty", "1", window_id="3")
        sway.add_window("kitty", "__i3_scratch", window_id="4")
        sway.add_window("kitty", None, window_id="5")

        index = await WindowIndex.capture(sway)
        snapshot = capture_layout(index, sway)

        assert snapshot.bay_windows == {"1": ["1", "3"], "web": ["2"]}

    @pytest.mark.asyncio
    async def test_named_holding_workspace_skipped(self):
        from ..fixtures.fakes import FakeSway

        sway = FakeSway(holding_workspace="hold")
        sway.add_window("kitty", "hold", window_id="1")
        sway.add_window("kitty", "2", window_id="2")

        snapshot = capture_layout(await WindowIndex.capture(sway), sway)

        assert snapshot.bay_windows == {"2": ["2"]}

    @pytest.mark.asyncio
    async def test_prune_snapshot(self, sway):
        sway.add_window("kitty", "1", window_id="1")
        snapshot = AssembledBench(bay_windows={"1": ["1", "2"], "web": ["3"]})

        pruned = prune_snapshot(snapshot, await WindowIndex.capture(sway))

        assert pruned.bay_windows == {"1": ["1"], "web": []}
        assert snapshot.bay_windows["1"] == ["1", "2"]


class TestStow:
    """Tests for LayoutOperations.stow()."""

    @pytest.mark.asyncio
    async def test_each_window_moved_once(self, layout, sway):
        """A window listed by two bays is only sent to the holding area once."""
        sway.add_window("kitty", "1", window_id="1")
        sway.add_window("chromium", "2", window_id="2")

        moved = await layout.stow(["1", "2", "1"])

        assert moved == ["1", "2"]
        assert sway.moves() == [("hold", "1"), ("hold", "2")]

    @pytest.mark.asyncio
    async def test_skips_gone_and_held(self, layout, sway):
        sway.add_window("kitty", "__i3_scratch", window_id="1")
        sway.add_window("kitty", "3", window_id="2")

        moved = await layout.stow(["gone", "1", "2"])

        assert moved == ["2"]
        assert sway.workspace_of("2") == "__i3_scratch"


class TestPlace:
    """Tests for LayoutOperations.place()."""

    @pytest.mark.asyncio
    async def test_only_misplaced_windows_move(self, layout, sway):
        sway.add_window("kitty", "1", window_id="1")
        sway.add_window("kitty", "3", window_id="2")

        moved = await layout.place({"1": ["1", "2", "gone"]})

        assert moved == ["2"]
        assert sway.moves() == [("move", "2", "1")]


class TestFocus:
    """Tests for LayoutOperations.focus()."""

    @pytest.fixture
    def bench(self) -> Bench:
        return Bench(
            name="work",
            bays=[BaySpec(name="web", tool_names=["docs"]), BaySpec(name="code", tool_names=["shell"])],
        )

    @pytest.mark.asyncio
    async def test_bays_shown_and_windows_placed(self, layout, sway, bench):
        sway.add_window("chromium", "1", window_id="10")
        sway.add_window("kitty", "code", window_id="11")
        sway.add_window("kitty", "__i3_scratch", window_id="12")
        snapshot = AssembledBench(bay_windows={"web": ["10"], "code": ["11", "12"]})

        await layout.focus(bench, snapshot, {"docs": "10", "shell": "11"})

        assert sway.visible == ["web", "code"]
        assert sway.workspace_of("10") == "web"
        assert sway.workspace_of("11") == "code"
        assert sway.workspace_of("12") == "code"
        assert ("move", "11", "code") not in sway.commands

    @pytest.mark.asyncio
    async def test_everything_else_stowed(self, layout, sway, bench):
        sway.add_window("chromium", "web", window_id="10")
        sway.add_window("kitty", "code", window_id="11")
        sway.add_window("firefox", "1", window_id="20")
        sway.add_window("slack", "4", window_id="21")
        sway.add_window("kitty", "__i3_scratch", window_id="22")
        snapshot = AssembledBench(bay_windows={"web": ["10"], "code": ["11"]})

        stowed = await layout.focus(bench, snapshot, {"docs": "10", "shell": "11"})

        assert stowed == ["20", "21"]
        bench_ids = {"10", "11"}
        for window in sway.windows:
            if window.id in bench_ids:
                assert window.workspace in ("web", "code")
            else:
                assert window.workspace == "__i3_scratch"

    @pytest.mark.asyncio
    async def test_no_stow(self, layout, sway, bench):
        sway.add_window("chromium", "1", window_id="10")
        sway.add_window("firefox", "1", window_id="20")

        stowed = await layout.focus(bench, AssembledBench(), {"docs": "10"}, stow_others=False)

        assert stowed == []
        assert sway.workspace_of("20") == "1"
        assert sway.workspace_of("10") == "web"

    @pytest.mark.asyncio
    async def test_snapshot_left_untouched(self, layout, sway, bench):
        sway.add_window("chromium", "1", window_id="10")
        snapshot = AssembledBench(bay_windows={"web": ["10"]})

        await layout.focus(bench, snapshot, {"docs": "10"})

        assert snapshot.bay_windows == {"web": ["10"]}

    @pytest.mark.asyncio
    async def test_shared_window_moved_once(self, layout, sway):
        """A tool listed in two bays lands on the first bay only."""
        bench = Bench(
            name="work",
            bays=[BaySpec(name="a", tool_names=["shell"]), BaySpec(name="b", tool_names=["shell"])],
        )
        sway.add_window("kitty", "1", window_id="11")

        await layout.focus(bench, AssembledBench(), {"shell": "11"})

        assert sway.moves() == [("move", "11", "a")]


class TestWindowsToStow:
    """Tests for windows_to_stow()."""

    @pytest.mark.asyncio
    async def test_skips_kept_held_and_unplaced(self, sway):
        sway.add_window("kitty", "1", window_id="1")
        sway.add_window("kitty", "1", window_id="2")
        sway.add_window("kitty", "__i3_scratch", window_id="3")
        sway.add_window("kitty", None, window_id="4")

        index = await WindowIndex.capture(sway)

        assert [w.id for w in windows_to_stow(index, {"1"}, sway)] == ["2"]
