"""Typed access to bench records.

Converts Store records to and from the pydantic models. Validation failures
on read become ParseError naming the record.
"""

import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models.assembly import AssembledBench, AssembledTool
from ..models.bench import Bench
from ..models.tool import ToolDefinition
from .errors import NotFoundError, ParseError
from .store import ASSEMBLED_BENCH, ASSEMBLED_TOOL, BENCH, TOOL, Store

logger = logging.getLogger("bench.persistence")

ACTIVE_BENCH_KEY = "active-bench"

M = TypeVar("M", bound=BaseModel)


class BenchRepository:
    """Reads and writes benches, tools, snapshots and the active marker."""

    def __init__(self, store: Store):
        self.store = store

    def _read(self, kind: str, name: str, model: Type[M]) -> M:
        record = self.store.read_record(kind, name)
        try:
            return model.model_validate(record)
        except ValidationError as e:
            raise ParseError(f"Malformed {kind} record '{name}': {e}", subject=name)

    def _write(self, kind: str, name: str, value: BaseModel) -> None:
        self.store.write_record(kind, name, value.model_dump(mode="json"))

    # Declarations

    def read_bench(self, name: str) -> Bench:
        try:
            return self._read(BENCH, name, Bench)
        except NotFoundError:
            raise NotFoundError(f"Bench '{name}' not found", subject=name)

    def write_bench(self, bench: Bench) -> None:
        self._write(BENCH, bench.name, bench)

    def bench_exists(self, name: str) -> bool:
        return self.store.has_record(BENCH, name)

    def list_bench_names(self) -> List[str]:
        return self.store.list_names(BENCH)

    def read_tool(self, name: str) -> ToolDefinition:
        try:
            return self._read(TOOL, name, ToolDefinition)
        except NotFoundError:
            raise NotFoundError(f"Tool '{name}' not found", subject=name)

    def write_tool(self, tool: ToolDefinition) -> None:
        self._write(TOOL, tool.name, tool)

    def tool_exists(self, name: str) -> bool:
        return self.store.has_record(TOOL, name)

    def list_tool_names(self) -> List[str]:
        return self.store.list_names(TOOL)

    # Derived state

    def read_assembled_bench(self, name: str) -> AssembledBench:
        """Last snapshot for a bench; empty if none was saved."""
        try:
            return self._read(ASSEMBLED_BENCH, name, AssembledBench)
        except NotFoundError:
            return AssembledBench()

    def has_assembled_bench(self, name: str) -> bool:
        return self.store.has_record(ASSEMBLED_BENCH, name)

    def write_assembled_bench(self, name: str, snapshot: AssembledBench) -> None:
        self._write(ASSEMBLED_BENCH, name, snapshot)

    def read_assembled_tool(self, name: str) -> Optional[AssembledTool]:
        try:
            return self._read(ASSEMBLED_TOOL, name, AssembledTool)
        except NotFoundError:
            return None

    def write_assembled_tool(self, name: str, record: AssembledTool) -> None:
        self._write(ASSEMBLED_TOOL, name, record)
        logger.debug(f"Tracking tool '{name}' -> window {record.window_id}")

    def forget_assembled_tool(self, name: str) -> None:
        if self.store.delete_record(ASSEMBLED_TOOL, name):
            logger.info(f"Dropped stale window tracking for tool '{name}'")

    # Active bench marker

    def get_active_bench(self) -> Optional[str]:
        try:
            return self.store.read_scalar(ACTIVE_BENCH_KEY)
        except NotFoundError:
            return None

    def set_active_bench(self, name: str) -> None:
        self.store.write_scalar(ACTIVE_BENCH_KEY, name)

    def clear_active_bench(self) -> None:
        self.store.clear_scalar(ACTIVE_BENCH_KEY)
