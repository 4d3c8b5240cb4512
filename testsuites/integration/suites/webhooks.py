"""Webhooks CRUD."""

from typing import Optional

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


WEBHOOK_URL = "https://example.com/webhook-test"
UPDATED_URL = "https://example.com/webhook-updated"


async def run(ctx: ExecutionContext) -> None:
    webhook_id: Optional[str] = None

    try:
        ctx.log("Creating webhook...")
        webhook = await ctx.client.webhooks.create({
            "ownerId": ctx.owner_id,
            "name": ctx.unique_name("webhook"),
            "url": WEBHOOK_URL,
            "enabled": False,
            "eventFilter": [],
        })
        webhook_id = webhook.get("id")
        ctx.assert_defined(webhook_id, "Webhook has ID")
        ctx.assert_equal(webhook.get("url"), WEBHOOK_URL, "Webhook URL matches")
        ctx.log(f"  Created webhook: {webhook_id}", "debug")

        ctx.log("Retrieving webhook...")
        retrieved = await ctx.client.webhooks.retrieve(webhook_id)
        ctx.assert_equal(retrieved.get("id"), webhook_id, "Retrieved webhook ID matches")
        ctx.assert_equal(retrieved.get("url"), WEBHOOK_URL, "Retrieved webhook URL matches")

        ctx.log("Listing webhooks...")
        page = await ctx.client.webhooks.list(owner_id=ctx.owner_id)
        ctx.assert_contains(page.items, lambda w: w.get("id") == webhook_id, "Webhook appears in list")
        ctx.log(f"  Found {len(page.items)} webhooks", "debug")

        ctx.log("Updating webhook...")
        updated = await ctx.client.webhooks.update(webhook_id, {"url": UPDATED_URL, "enabled": True})
        ctx.assert_equal(updated.get("url"), UPDATED_URL, "Webhook URL updated")

        ctx.log("Deleting webhook...")
        await ctx.client.webhooks.delete(webhook_id)
        webhook_id = None

        ctx.log("All webhook operations passed")
    finally:
        if webhook_id:
            await ctx.release("webhook", lambda: ctx.client.webhooks.delete(webhook_id))


SUITE = Suite("webhooks", "Webhooks CRUD operations", run)
