"""Current user (read-only)."""

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    ctx.log("Retrieving current user...")
    user = await ctx.client.users.me()
    ctx.assert_defined(user.get("email"), "User has email")
    ctx.log(f"  User: {user['email']}", "debug")

    ctx.log("All user operations passed")


SUITE = Suite("users", "Users (read-only, current user)", run)
