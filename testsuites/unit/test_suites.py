"""
Bundled suites against an in-memory stand-in for the Render API.

The fake mirrors the client surface (resource namespaces returning dicts and
Page objects, ApiError on missing ids) so every suite can run end to end and
we can check that nothing is left behind.
"""

import itertools
from typing import Any, Dict, Optional

import allure
import pytest

from testsuites.integration.framework.api_client import ApiError, Page
from testsuites.integration.framework.config_loader import RunConfig
from testsuites.integration.framework.context import ExecutionContext
from testsuites.integration.framework.reporter import ConsoleReporter
from testsuites.integration.framework.runner import SuiteRunner
from testsuites.integration.suites import CATALOG


OWNER_ID = "tea-fake"
_ids = itertools.count(1)


def _missing(path: str) -> ApiError:
    return ApiError(404, "GET", path, "not found")


class FakeResource:
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self.records: Dict[str, Dict[str, Any]] = {}
        self.fail_on: Optional[str] = None

    def _check(self, verb: str) -> None:
        if self.fail_on == verb:
            raise ApiError(500, verb.upper(), f"/{self.prefix}", "injected failure")

    def _get(self, resource_id: str) -> Dict[str, Any]:
        if resource_id not in self.records:
            raise _missing(f"/{self.prefix}/{resource_id}")
        return self.records[resource_id]

    async def create(self, payload):
        self._check("create")
        record = {"id": f"{self.prefix}-{next(_ids)}", **payload}
        self.records[record["id"]] = record
        return dict(record)

    async def retrieve(self, resource_id):
        self._check("retrieve")
        return dict(self._get(resource_id))

    async def list(self, **filters):
        self._check("list")
        return Page(items=[dict(r) for r in self.records.values()])

    async def update(self, resource_id, patch):
        self._check("update")
        record = self._get(resource_id)
        record.update(patch)
        return dict(record)

    async def delete(self, resource_id):
        self._check("delete")
        self._get(resource_id)
        del self.records[resource_id]


class FakeKeyed:
    """Keyed sub-collection stored on the parent record, like env vars."""

    def __init__(self, parent: FakeResource, field: str, key_field: str, value_field: str) -> None:
        self.parent = parent
        self.field = field
        self.key_field = key_field
        self.value_field = value_field

    def _entries(self, parent_id):
        return self.parent._get(parent_id).setdefault(self.field, [])

    async def list(self, parent_id, **filters):
        return Page(items=[dict(e) for e in self._entries(parent_id)])

    async def retrieve(self, parent_id, key):
        for entry in self._entries(parent_id):
            if entry[self.key_field] == key:
                return dict(entry)
        raise _missing(f"{parent_id}/{key}")

    async def set(self, parent_id, key, value):
        entries = self._entries(parent_id)
        for entry in entries:
            if entry[self.key_field] == key:
                entry[self.value_field] = value
                return dict(entry)
        entry = {self.key_field: key, self.value_field: value}
        entries.append(entry)
        return dict(entry)

    async def delete(self, parent_id, key):
        entries = self._entries(parent_id)
        entries[:] = [e for e in entries if e[self.key_field] != key]


class FakeDeploys:
    def __init__(self, services: "FakeServices") -> None:
        self.services = services

    async def list(self, service_id, **filters):
        return Page(items=[{"id": d} for d in self.services._get(service_id)["_deploys"]])

    async def retrieve(self, service_id, deploy_id):
        if deploy_id not in self.services._get(service_id)["_deploys"]:
            raise _missing(deploy_id)
        return {"id": deploy_id}


class FakeServices(FakeResource):
    def __init__(self) -> None:
        super().__init__("srv")
        self.deploys = FakeDeploys(self)
        self.env_vars = FakeKeyed(self, "envVars", "key", "value")
        self.secret_files = FakeKeyed(self, "secretFiles", "name", "content")

    async def create(self, payload):
        service = await super().create(payload)
        deploy_id = f"dep-{next(_ids)}"
        self.records[service["id"]]["_deploys"] = [deploy_id]
        self.records[service["id"]]["suspended"] = "not_suspended"
        return {"service": service, "deployId": deploy_id}

    async def suspend(self, service_id):
        self._get(service_id)["suspended"] = "suspended"


class FakeEnvGroups(FakeResource):
    def __init__(self) -> None:
        super().__init__("evg")
        self.env_vars = FakeKeyed(self, "envVars", "key", "value")
        self.secret_files = FakeKeyed(self, "secretFiles", "name", "content")


class FakeDatastore(FakeResource):
    async def connection_info(self, resource_id):
        self._get(resource_id)
        return {"internalConnectionString": f"redis://{resource_id}"}


class FakeUsers:
    async def me(self):
        return {"email": "ci@example.com", "name": "CI"}


class FakeAuditLogs:
    async def list_for_owner(self, owner_id, **filters):
        limit = filters.get("limit", 10)
        return Page(items=[{"id": f"log-{i}"} for i in range(min(limit, 3))])


class FakeRenderClient:
    def __init__(self) -> None:
        self.projects = FakeResource("prj")
        self.environments = FakeResource("evm")
        self.env_groups = FakeEnvGroups()
        self.services = FakeServices()
        self.postgres = FakeDatastore("dpg")
        self.key_value = FakeDatastore("red")
        self.webhooks = FakeResource("whk")
        self.workspaces = FakeResource("own")
        self.workspaces.records[OWNER_ID] = {"id": OWNER_ID, "name": "CI team", "type": "team"}
        self.blueprints = FakeResource("exs")
        self.users = FakeUsers()
        self.audit_logs = FakeAuditLogs()

    def leftovers(self):
        stores = [
            self.projects, self.environments, self.env_groups, self.services,
            self.postgres, self.key_value, self.webhooks,
        ]
        return {s.prefix: list(s.records) for s in stores if s.records}


@pytest.fixture
def client():
    return FakeRenderClient()


@pytest.fixture
def config():
    return RunConfig(api_key="rnd_fake", owner_id=OWNER_ID, include_expensive=True)


def make_ctx(config, client, name):
    return ExecutionContext(config, client, name)


@allure.epic("Integration Harness")
@allure.feature("Suite Catalog")
@pytest.mark.suites
class TestCatalog:

    def test_declared_order_and_expensive_flags(self):
        assert CATALOG.names == [
            "users", "workspaces", "projects", "environments", "envGroups", "webhooks",
            "services", "auditLogs", "events", "blueprints", "postgres", "keyValue",
        ]
        assert [s.name for s in CATALOG if s.expensive] == ["postgres", "keyValue"]
        assert all(s.description for s in CATALOG)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", CATALOG.names)
    async def test_suite_passes_and_leaves_nothing_behind(self, config, client, name):
        await CATALOG.get(name).run(make_ctx(config, client, name))
        assert client.leftovers() == {}

    @pytest.mark.asyncio
    async def test_blueprint_retrieve_when_one_exists(self, config, client):
        client.blueprints.records["exs-1"] = {"id": "exs-1", "name": "infra"}
        await CATALOG.get("blueprints").run(make_ctx(config, client, "blueprints"))

    @pytest.mark.asyncio
    async def test_workspaces_fails_for_unknown_owner(self, client):
        config = RunConfig(api_key="rnd_fake", owner_id="tea-other")
        with pytest.raises(AssertionError, match="Configured owner ID exists"):
            await CATALOG.get("workspaces").run(make_ctx(config, client, "workspaces"))


@pytest.mark.suites
class TestSuiteLocalCleanup:

    @pytest.mark.asyncio
    async def test_project_deleted_when_update_fails(self, config, client):
        client.projects.fail_on = "update"

        with pytest.raises(ApiError, match="injected failure"):
            await CATALOG.get("projects").run(make_ctx(config, client, "projects"))

        assert client.projects.records == {}

    @pytest.mark.asyncio
    async def test_environment_and_project_deleted_when_list_fails(self, config, client):
        client.environments.fail_on = "list"

        with pytest.raises(ApiError):
            await CATALOG.get("environments").run(make_ctx(config, client, "environments"))

        assert client.leftovers() == {}

    @pytest.mark.asyncio
    async def test_failing_cleanup_does_not_replace_suite_error(self, config, client):
        client.webhooks.fail_on = "update"
        ctx = make_ctx(config, client, "webhooks")

        async def broken_delete(resource_id):
            raise ApiError(503, "DELETE", "/webhooks", "unavailable")

        client.webhooks.delete = broken_delete

        with pytest.raises(ApiError, match="injected failure"):
            await CATALOG.get("webhooks").run(ctx)

        assert ctx.cleanup_errors == 1

    @pytest.mark.asyncio
    async def test_connection_info_not_ready_is_tolerated(self, config, client):
        async def not_ready(resource_id):
            raise ApiError(404, "GET", "/postgres/x/connection-info", "not ready")

        client.postgres.connection_info = not_ready
        await CATALOG.get("postgres").run(make_ctx(config, client, "postgres"))
        assert client.postgres.records == {}


@pytest.mark.suites
@pytest.mark.asyncio
async def test_full_catalog_run_against_fake_api(config, client):
    lines = []
    report = await SuiteRunner(
        CATALOG, config, client, reporter=ConsoleReporter(emit=lines.append)
    ).run()

    assert report.success, [f"{r.suite}: {r.error_message}" for r in report.failed]
    assert len(report.results) == len(CATALOG)
    assert client.leftovers() == {}
