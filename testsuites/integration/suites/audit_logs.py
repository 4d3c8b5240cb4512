"""Audit logs (read-only). New accounts may have none, so only the calls are checked."""

from datetime import datetime, timedelta, timezone

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


async def run(ctx: ExecutionContext) -> None:
    ctx.log("Listing audit logs...")
    page = await ctx.client.audit_logs.list_for_owner(ctx.owner_id, limit=10)
    ctx.log(f"  Found {len(page.items)} audit log entries", "debug")

    one_week_ago = datetime.now(timezone.utc) - timedelta(days=7)
    ctx.log("Listing audit logs with date filter...")
    recent = await ctx.client.audit_logs.list_for_owner(
        ctx.owner_id,
        start_time=one_week_ago.isoformat(),
        limit=5,
    )
    ctx.assert_that(len(recent.items) <= 5, "Audit log limit is honoured")
    ctx.log(f"  Found {len(recent.items)} recent audit log entries", "debug")

    ctx.log("All audit log operations passed")


SUITE = Suite("auditLogs", "Audit Logs (read-only, list)", run)
