"""Pytest configuration for linkguard tests."""

import sys
from pathlib import Path

# Ensure src/linkguard is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)
