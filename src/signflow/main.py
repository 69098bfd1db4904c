"""Application entry point and composition root."""

import argparse
import asyncio
import logging
from datetime import timedelta

from signflow import __version__
from signflow.application.coordinator import WorkflowCoordinator
from signflow.application.locks import DocumentLocks
from signflow.config import Settings, get_settings
from signflow.domain.services import DocumentLifecycle, FieldRegistry, SignerRoster
from signflow.infrastructure.auth.keycloak_provider import KeycloakProvider
from signflow.infrastructure.notification.logging_notifier import LoggingNotifier
from signflow.infrastructure.notification.webhook_notifier import WebhookNotifier
from signflow.infrastructure.persistence.postgres.connection import create_pool
from signflow.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from signflow.infrastructure.storage.public_bucket_storage import PublicBucketStorage
from signflow.interfaces.api.app import create_app
from signflow.interfaces.api.middleware.auth import AuthMiddleware
from signflow.interfaces.api.middleware.cors import CORSMiddleware
from signflow.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware

logger = logging.getLogger("signflow")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_coordinator(settings: Settings, uow_factory, notifier) -> WorkflowCoordinator:
    """Wire the domain services and the coordinator from settings."""
    roster = SignerRoster()
    registry = FieldRegistry(roster)
    lifecycle = DocumentLifecycle(
        roster,
        registry,
        decline_policy=settings.decline_policy,
        default_expiry=(
            timedelta(days=settings.default_expiry_days) if settings.default_expiry_days else None
        ),
    )
    return WorkflowCoordinator(
        unit_of_work_factory=uow_factory,
        lifecycle=lifecycle,
        notifier=notifier,
        blob_storage=PublicBucketStorage(settings.blob_base_url),
        locks=DocumentLocks(timeout=settings.lock_timeout_seconds),
        page_size=(settings.default_page_width, settings.default_page_height),
    )


def build_notifier(settings: Settings) -> LoggingNotifier | WebhookNotifier:
    if settings.webhook_url:
        return WebhookNotifier(
            settings.webhook_url,
            secret=settings.webhook_secret,
            timeout=settings.webhook_timeout_seconds,
        )
    return LoggingNotifier()


def create_signflow_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings)
    pool = create_pool(settings.database_url, settings.pool_min_size, settings.pool_max_size)
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None and settings.environment == "production":
        logger.warning("Keycloak is not configured; requests are not authenticated")

    notifier = build_notifier(settings)
    coordinator = build_coordinator(settings, uow_factory, notifier)
    on_shutdown = [coordinator.drain_notifications]
    if isinstance(notifier, WebhookNotifier):
        on_shutdown.append(notifier.aclose)

    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return create_app(
        coordinator,
        pool=pool,
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool, on_shutdown=on_shutdown),
            AuthMiddleware(keycloak),
        ],
    )


async def sweep_expired(settings: Settings) -> int:
    """Expire overdue documents once, then exit."""
    pool = create_pool(settings.database_url, settings.pool_min_size, settings.pool_max_size)
    await pool.open()
    notifier = build_notifier(settings)
    try:
        coordinator = build_coordinator(settings, create_uow_factory(pool), notifier)
        expired = await coordinator.sweep_expired(settings.sweep_batch_size)
        await coordinator.drain_notifications()
    finally:
        if isinstance(notifier, WebhookNotifier):
            await notifier.aclose()
        await pool.close()
    return expired


def run_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run uvicorn server."""
    import uvicorn

    app = create_signflow_app()
    uvicorn.run(app, host=host, port=port)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(prog="signflow", description=f"SignFlow v{__version__}")
    sub = parser.add_subparsers(dest="command")
    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    sub.add_parser("sweep", help="Expire overdue documents")
    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server(args.host, args.port)
    elif args.command == "sweep":
        settings = get_settings()
        configure_logging(settings)
        expired = asyncio.run(sweep_expired(settings))
        print(f"Expired {expired} document(s)")
    else:
        print(f"SignFlow v{__version__}")


def sweep_main() -> None:
    main(["sweep"])
