"""Test helpers and utilities.

This module provides shared utilities for testing:
- assertions: Custom assertions for command results and tree state
- builders: Test data builders for command records and snapshots
"""

from tests.helpers.assertions import (
    assert_error_response,
    assert_success_response,
    assert_tree_unchanged,
    assert_trees_equal,
)
from tests.helpers.builders import (
    build_snapshot,
    create_cmd,
    editor_cmd,
    manager_cmd,
    replace_cmd,
)

__all__ = [
    "assert_success_response",
    "assert_error_response",
    "assert_tree_unchanged",
    "assert_trees_equal",
    "build_snapshot",
    "create_cmd",
    "editor_cmd",
    "manager_cmd",
    "replace_cmd",
]
