"""
Services CRUD plus nested resources.

Covers deploys (list/retrieve), env vars and secret files (set/list/update/
retrieve/delete) and suspension, on a web service running a public image.
"""

from typing import Optional

from ..framework.context import ExecutionContext
from ..framework.registry import Suite


ENV_KEY = "TEST_ENV_VAR"
SECRET_NAME = "test-secret.json"


async def run(ctx: ExecutionContext) -> None:
    service_name = ctx.unique_name("service")
    service_id: Optional[str] = None
    services = ctx.client.services

    try:
        ctx.log(f'Creating service "{service_name}"...')
        created = await services.create({
            "type": "web_service",
            "name": service_name,
            "ownerId": ctx.owner_id,
            "image": {"ownerId": ctx.owner_id, "imagePath": "nginx:alpine"},
            "serviceDetails": {
                "runtime": "image",
                "plan": "starter",
                "region": "oregon",
                "envSpecificDetails": {"dockerCommand": ""},
            },
        })
        service = created.get("service", {})
        deploy_id = created.get("deployId")
        service_id = service.get("id")
        ctx.assert_that(service_id, "Service has ID")
        ctx.assert_equal(service.get("name"), service_name, "Service name matches")
        ctx.log(
            f"  Created service: {service_id}" + (f", deploy: {deploy_id}" if deploy_id else ""),
            "debug",
        )

        ctx.log("Retrieving service...")
        retrieved = await services.retrieve(service_id)
        ctx.assert_equal(retrieved.get("id"), service_id, "Retrieved service ID matches")
        ctx.assert_equal(retrieved.get("name"), service_name, "Retrieved service name matches")

        ctx.log("Listing services...")
        page = await services.list(owner_id=ctx.owner_id)
        ctx.assert_contains(page.items, lambda s: s.get("id") == service_id, "Service appears in list")
        ctx.log(f"  Found {len(page.items)} services", "debug")

        updated_name = f"{service_name}-updated"
        ctx.log(f'Updating service name to "{updated_name}"...')
        updated = await services.update(service_id, {"name": updated_name})
        ctx.assert_equal(updated.get("name"), updated_name, "Service name updated")

        # Deploys
        ctx.log("Listing deploys...")
        deploys = (await services.deploys.list(service_id)).items
        ctx.assert_that(len(deploys) > 0, "Service has at least one deploy")
        ctx.log(f"  Found {len(deploys)} deploys", "debug")

        ctx.log("Retrieving deploy...")
        first_deploy_id = deploys[0].get("id")
        deploy = await services.deploys.retrieve(service_id, first_deploy_id)
        ctx.assert_equal(deploy.get("id"), first_deploy_id, "Deploy ID matches")

        # Env vars
        ctx.log("Creating env var...")
        env_var = await services.env_vars.set(service_id, ENV_KEY, "test-value")
        ctx.assert_equal(env_var.get("key"), ENV_KEY, "Env var key matches")
        ctx.assert_equal(env_var.get("value"), "test-value", "Env var value matches")

        ctx.log("Listing env vars...")
        env_vars = (await services.env_vars.list(service_id)).items
        ctx.assert_contains(env_vars, lambda v: v.get("key") == ENV_KEY, "Created env var appears in list")

        ctx.log("Updating env var...")
        updated_var = await services.env_vars.set(service_id, ENV_KEY, "updated-value")
        ctx.assert_equal(updated_var.get("value"), "updated-value", "Env var value updated")

        ctx.log("Retrieving env var...")
        retrieved_var = await services.env_vars.retrieve(service_id, ENV_KEY)
        ctx.assert_equal(retrieved_var.get("value"), "updated-value", "Retrieved env var value matches")

        ctx.log("Deleting env var...")
        await services.env_vars.delete(service_id, ENV_KEY)

        # Secret files
        ctx.log("Creating secret file...")
        secret = await services.secret_files.set(service_id, SECRET_NAME, '{"secret": "value"}')
        ctx.assert_equal(secret.get("name"), SECRET_NAME, "Secret file name matches")

        ctx.log("Listing secret files...")
        secrets = (await services.secret_files.list(service_id)).items
        ctx.assert_contains(
            secrets, lambda f: f.get("name") == SECRET_NAME, "Created secret file appears in list"
        )

        ctx.log("Updating secret file...")
        updated_secret = await services.secret_files.set(service_id, SECRET_NAME, '{"secret": "updated"}')
        ctx.assert_equal(updated_secret.get("name"), SECRET_NAME, "Secret file name matches after update")

        ctx.log("Deleting secret file...")
        await services.secret_files.delete(service_id, SECRET_NAME)

        ctx.log("Suspending service...")
        await services.suspend(service_id)
        suspended = await services.retrieve(service_id)
        ctx.assert_equal(suspended.get("suspended"), "suspended", "Service is suspended")

        ctx.log("Deleting service...")
        await services.delete(service_id)
        service_id = None

        ctx.log("All service operations passed")
    finally:
        if service_id:
            await ctx.release("service", lambda: services.delete(service_id))


SUITE = Suite("services", "Services CRUD + nested resources", run)
