"""
Suite catalog in recommended execution order.

Read-only suites run first (fast, no side effects), then CRUD suites, then
the slower service suite, read-only monitoring suites, and finally the
expensive datastore suites that need --include-expensive.
"""

from ..framework.registry import SuiteRegistry
from . import (
    audit_logs,
    blueprints,
    datastores,
    env_groups,
    environments,
    events,
    projects,
    services,
    users,
    webhooks,
    workspaces,
)

CATALOG = SuiteRegistry([
    users.SUITE,
    workspaces.SUITE,
    projects.SUITE,
    environments.SUITE,
    env_groups.SUITE,
    webhooks.SUITE,
    services.SUITE,
    audit_logs.SUITE,
    events.SUITE,
    blueprints.SUITE,
    datastores.POSTGRES,
    datastores.KEY_VALUE,
])

__all__ = ["CATALOG"]
