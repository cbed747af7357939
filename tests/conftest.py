"""Pytest configuration for bench tests."""

import sys
from pathlib import Path

# Make bench_manager importable from a source checkout BEFORE test collection
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))


def pytest_configure(config):
    """Configure pytest before test collection."""
    if str(package_root) not in sys.path:
        sys.path.insert(0, str(package_root))
