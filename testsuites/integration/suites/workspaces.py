"""Workspaces (read-only): the configured owner must be visible to the API key."""

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    ctx.log("Listing workspaces...")
    page = await ctx.client.workspaces.list()
    ctx.assert_that(len(page.items) > 0, "At least one workspace exists")
    ctx.log(f"  Found {len(page.items)} workspaces", "debug")

    ctx.assert_contains(
        page.items,
        lambda w: w.get("id") == ctx.owner_id,
        "Configured owner ID exists in workspaces",
    )

    ctx.log("Retrieving workspace...")
    workspace = await ctx.client.workspaces.retrieve(ctx.owner_id)
    ctx.assert_equal(workspace.get("id"), ctx.owner_id, "Retrieved workspace ID matches")
    ctx.log(f"  Workspace: {workspace.get('name')} ({workspace.get('type')})", "debug")

    ctx.log("All workspace operations passed")


SUITE = Suite("workspaces", "Workspaces (read-only, list)", run)
