"""Blueprints (read-only). Accounts without IaC have none; retrieve is checked when one exists."""

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    ctx.log("Listing blueprints...")
    page = await ctx.client.blueprints.list(owner_id=ctx.owner_id, limit=10)
    ctx.log(f"  Found {len(page.items)} blueprints", "debug")

    if page.items:
        blueprint_id = page.items[0]["id"]
        ctx.log(f"Retrieving blueprint {blueprint_id}...")
        blueprint = await ctx.client.blueprints.retrieve(blueprint_id)
        ctx.assert_equal(blueprint.get("id"), blueprint_id, "Blueprint ID matches")
        ctx.log(f"  Blueprint: {blueprint.get('name')}", "debug")
    else:
        ctx.log("  No blueprints to retrieve (this is okay)", "debug")

    ctx.log("All blueprint operations passed")


SUITE = Suite("blueprints", "Blueprints (read-only, list)", run)
