"""Shared test fixtures for all tests.

This file imports and re-exports fixtures from the fixtures/ module so they
are discovered by pytest for every test, organized by component.
"""

# Import all fixtures from organized modules
from tests.fixtures.config import (  # noqa: F401
    clean_env,
    config_path,
    small_file_settings,
    workspace_settings,
)
from tests.fixtures.persistence import project_store, strict_project_store  # noqa: F401
from tests.fixtures.workspace import (  # noqa: F401
    event_bus,
    executor,
    populated_executor,
    populated_tree,
    recorder,
    tree,
)
