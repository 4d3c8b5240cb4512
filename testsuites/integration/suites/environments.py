"""Environments CRUD. Environments live inside a project, so one is created first."""

from typing import Optional

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    project_name = ctx.unique_name("env-project")
    env_name = ctx.unique_name("environment")
    project_id: Optional[str] = None
    environment_id: Optional[str] = None

    try:
        ctx.log(f'Creating project "{project_name}" for environments...')
        project = await ctx.client.projects.create({
            "name": project_name,
            "ownerId": ctx.owner_id,
            "environments": [{"name": "production"}],
        })
        project_id = project["id"]
        ctx.log(f"  Created project: {project_id}", "debug")

        ctx.log(f'Creating environment "{env_name}"...')
        environment = await ctx.client.environments.create({
            "name": env_name,
            "projectId": project_id,
            "protectedStatus": "not_protected",
        })
        environment_id = environment.get("id")
        ctx.assert_defined(environment_id, "Environment has ID")
        ctx.assert_equal(environment.get("name"), env_name, "Environment name matches")
        ctx.log(f"  Created environment: {environment_id}", "debug")

        ctx.log("Retrieving environment...")
        retrieved = await ctx.client.environments.retrieve(environment_id)
        ctx.assert_equal(retrieved.get("id"), environment_id, "Retrieved environment ID matches")
        ctx.assert_equal(retrieved.get("name"), env_name, "Retrieved environment name matches")

        ctx.log("Listing environments...")
        page = await ctx.client.environments.list(project_id=project_id)
        ctx.assert_contains(
            page.items, lambda e: e.get("id") == environment_id, "Environment appears in list"
        )
        ctx.log(f"  Found {len(page.items)} environments", "debug")

        updated_name = f"{env_name}-updated"
        ctx.log(f'Updating environment name to "{updated_name}"...')
        updated = await ctx.client.environments.update(environment_id, {"name": updated_name})
        ctx.assert_equal(updated.get("name"), updated_name, "Environment name updated")

        ctx.log("Deleting environment...")
        await ctx.client.environments.delete(environment_id)
        environment_id = None

        ctx.log("Deleting project...")
        await ctx.client.projects.delete(project_id)
        project_id = None

        ctx.log("All environment operations passed")
    finally:
        # Environment before its project
        if environment_id:
            await ctx.release("environment", lambda: ctx.client.environments.delete(environment_id))
        if project_id:
            await ctx.release("project", lambda: ctx.client.projects.delete(project_id))


SUITE = Suite("environments", "Environments CRUD (requires project)", run)
