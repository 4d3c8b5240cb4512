"""Projects CRUD, including verification that a deleted project is gone."""

from typing import Optional

from ..framework.api_client import ApiError
from ..framework.assertions import AssertionFailure
from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    project_name = ctx.unique_name("project")
    project_id: Optional[str] = None

    try:
        ctx.log(f'Creating project "{project_name}"...')
        project = await ctx.client.projects.create({
            "name": project_name,
            "ownerId": ctx.owner_id,
            "environments": [{"name": "production"}],
        })
        project_id = project.get("id")
        ctx.assert_defined(project_id, "Project has ID")
        ctx.assert_equal(project.get("name"), project_name, "Project name matches")
        ctx.log(f"  Created project: {project_id}", "debug")

        ctx.log("Retrieving project...")
        retrieved = await ctx.client.projects.retrieve(project_id)
        ctx.assert_equal(retrieved.get("id"), project_id, "Retrieved project ID matches")
        ctx.assert_equal(retrieved.get("name"), project_name, "Retrieved project name matches")

        ctx.log("Listing projects...")
        page = await ctx.client.projects.list(owner_id=ctx.owner_id)
        ctx.assert_contains(page.items, lambda p: p.get("id") == project_id, "Project appears in list")
        ctx.log(f"  Found {len(page.items)} projects", "debug")

        updated_name = f"{project_name}-updated"
        ctx.log(f'Updating project name to "{updated_name}"...')
        updated = await ctx.client.projects.update(project_id, {"name": updated_name})
        ctx.assert_equal(updated.get("name"), updated_name, "Project name updated")

        ctx.log("Deleting project...")
        await ctx.client.projects.delete(project_id)
        deleted_id, project_id = project_id, None

        ctx.log("Verifying deletion...")
        try:
            await ctx.client.projects.retrieve(deleted_id)
        except ApiError:
            ctx.log("  Project successfully deleted", "debug")
        else:
            raise AssertionFailure("Project should have been deleted")

        ctx.log("All project operations passed")
    finally:
        if project_id:
            await ctx.release("project", lambda: ctx.client.projects.delete(project_id))


SUITE = Suite("projects", "Projects CRUD operations", run)
