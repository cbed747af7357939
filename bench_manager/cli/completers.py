"""Shell completion helpers for the bench CLI (argcomplete).

Completers read record names straight from the store; a broken config or
data directory just yields no suggestions.
"""

from typing import List

from ..core.config import BenchConfig
from ..core.errors import BenchError
from ..core.persistence import BenchRepository
from ..core.store import JsonFileStore
from ..models.tool import ToolKind


def _repository() -> BenchRepository:
    config = BenchConfig.load()
    return BenchRepository(JsonFileStore(config.data_dir))


def _filter(names: List[str], prefix: str) -> List[str]:
    return [name for name in names if name.startswith(prefix)]


def complete_bench_names(prefix: str, **kwargs) -> List[str]:
    try:
        return _filter(_repository().list_bench_names(), prefix)
    except (BenchError, OSError):
        return []


def complete_tool_names(prefix: str, **kwargs) -> List[str]:
    try:
        return _filter(_repository().list_tool_names(), prefix)
    except (BenchError, OSError):
        return []


def complete_bay_names(prefix: str, parsed_args=None, **kwargs) -> List[str]:
    """Bays of the bench already given on the command line."""
    bench_name = getattr(parsed_args, "bench", None)
    if not bench_name:
        return []
    try:
        bench = _repository().read_bench(bench_name)
    except (BenchError, OSError):
        return []
    return _filter(bench.bay_names(), prefix)


def complete_tool_kinds(prefix: str, **kwargs) -> List[str]:
    return _filter([kind.value for kind in ToolKind], prefix)
