"""Environment groups CRUD plus their env vars and secret files."""

from typing import Optional

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


def _has_key(env_vars, key: str) -> bool:
    return any(v.get("key") == key for v in env_vars or [])


async def run(ctx: ExecutionContext) -> None:
    group_name = ctx.unique_name("envgroup")
    group_id: Optional[str] = None
    env_groups = ctx.client.env_groups

    try:
        ctx.log(f'Creating env group "{group_name}"...')
        group = await env_groups.create({
            "name": group_name,
            "ownerId": ctx.owner_id,
            "envVars": [
                {"key": "TEST_VAR_1", "value": "value1"},
                {"key": "TEST_VAR_2", "value": "value2"},
            ],
            "secretFiles": [{"name": "test-secret.txt", "content": "secret-content"}],
        })
        group_id = group.get("id")
        ctx.assert_defined(group_id, "Env group has ID")
        ctx.assert_equal(group.get("name"), group_name, "Env group name matches")
        ctx.log(f"  Created env group: {group_id}", "debug")

        ctx.log("Retrieving env group...")
        retrieved = await env_groups.retrieve(group_id)
        ctx.assert_equal(retrieved.get("id"), group_id, "Retrieved env group ID matches")
        ctx.assert_equal(retrieved.get("name"), group_name, "Retrieved env group name matches")
        ctx.assert_that(_has_key(retrieved.get("envVars"), "TEST_VAR_1"), "TEST_VAR_1 exists")
        ctx.assert_that(_has_key(retrieved.get("envVars"), "TEST_VAR_2"), "TEST_VAR_2 exists")

        ctx.log("Listing env groups...")
        page = await env_groups.list(owner_id=ctx.owner_id)
        ctx.assert_contains(page.items, lambda g: g.get("id") == group_id, "Env group appears in list")
        ctx.log(f"  Found {len(page.items)} env groups", "debug")

        ctx.log("Updating env var...")
        updated_var = await env_groups.env_vars.set(group_id, "TEST_VAR_1", "updated-value")
        ctx.assert_equal(updated_var.get("value"), "updated-value", "Env var value updated")

        ctx.log("Retrieving env var...")
        retrieved_var = await env_groups.env_vars.retrieve(group_id, "TEST_VAR_1")
        ctx.assert_equal(retrieved_var.get("value"), "updated-value", "Retrieved env var value matches")

        ctx.log("Deleting env var...")
        await env_groups.env_vars.delete(group_id, "TEST_VAR_2")
        after_delete = await env_groups.retrieve(group_id)
        ctx.assert_that(
            not _has_key(after_delete.get("envVars"), "TEST_VAR_2"), "TEST_VAR_2 was deleted"
        )

        ctx.log("Updating secret file...")
        updated_secret = await env_groups.secret_files.set(
            group_id, "test-secret.txt", "updated-secret-content"
        )
        ctx.assert_equal(updated_secret.get("name"), "test-secret.txt", "Secret file name matches")

        ctx.log("Retrieving secret file...")
        retrieved_secret = await env_groups.secret_files.retrieve(group_id, "test-secret.txt")
        ctx.assert_equal(
            retrieved_secret.get("name"), "test-secret.txt", "Retrieved secret file name matches"
        )

        updated_name = f"{group_name}-updated"
        ctx.log(f'Updating env group name to "{updated_name}"...')
        updated = await env_groups.update(group_id, {"name": updated_name})
        ctx.assert_equal(updated.get("name"), updated_name, "Env group name updated")

        ctx.log("Deleting env group...")
        await env_groups.delete(group_id)
        group_id = None

        ctx.log("All env group operations passed")
    finally:
        if group_id:
            await ctx.release("env group", lambda: env_groups.delete(group_id))


SUITE = Suite("envGroups", "Environment Groups CRUD + env vars", run)
