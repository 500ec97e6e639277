"""
CLI entrypoint for the booking operations toolkit.

Provides database inspection and maintenance, Firebase role assignment and
webhook smoke tests. Every command is a one-shot run that exits 0 or 1.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from booking_ops.config.config import Config, load_config
from booking_ops.config.dotenv_loader import load_dotenv_files
from booking_ops.exceptions import BookingOpsError, ConfigurationError
from booking_ops.identity.firebase import initialize_firebase
from booking_ops.identity.roles import REAUTH_NOTE, RoleAssignment, assign_roles
from booking_ops.monitoring.console import (
    log_database,
    log_error,
    log_formatted,
    log_info,
    log_success,
    log_warning,
)
from booking_ops.monitoring.logger import get_logger, setup_logging
from booking_ops.monitoring.redaction import redact
from booking_ops.storage import maintenance
from booking_ops.storage.db import MongoDatabase, connect
from booking_ops.webhooks.booking_webhook import run_booking_webhook_check
from booking_ops.webhooks.email_hook import all_passed, run_email_hook_checks

app = typer.Typer(
    name="booking-ops",
    help="Operator tools for the booking management backend",
    add_completion=False,
)

logger = get_logger(__name__)

ConfigOption = typer.Option(None, "--config", help="Path to config file (defaults to the packaged config.yaml)")


def _bootstrap(config_path: Optional[Path]) -> Config:
    """Load .env files, configuration and logging for a command run."""
    load_dotenv_files()
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        log_error("Configuration error", e)
        raise typer.Exit(code=1)
    setup_logging(config.monitoring.log_level, config.monitoring.log_format, config.monitoring.log_file)
    logger.debug("Configuration loaded", environment=config.environment)
    return config


@contextmanager
def _database(config: Config) -> Iterator[MongoDatabase]:
    """Open, verify and always close the connection; errors exit 1."""
    try:
        database = connect(config)
    except BookingOpsError as e:
        log_error("Database connection error", e)
        raise typer.Exit(code=1)

    log_success(f"Connected to MongoDB ({database.host}, database {database.name})")
    try:
        yield database
    except BookingOpsError as e:
        log_error("Database error", e)
        raise typer.Exit(code=1)
    finally:
        database.close()


@app.command()
def collections(config_path: Optional[Path] = ConfigOption):
    """
    List all collections and the non-empty ones' document counts.

    Example:
        booking-ops collections
    """
    config = _bootstrap(config_path)
    with _database(config) as db:
        names = maintenance.list_collections(db)
        typer.echo("\n📋 All Collections:")
        for i, name in enumerate(names, start=1):
            typer.echo(f"{i}. {name}")

        counts = maintenance.collection_counts(db, names)
        typer.echo("\n📊 Document Counts:")
        for name, count in counts.items():
            typer.echo(f"   {name}: {count} documents")


@app.command("db-info")
def db_info(config_path: Optional[Path] = ConfigOption):
    """Show host, database name and counts of the inspection collections."""
    config = _bootstrap(config_path)
    with _database(config) as db:
        counts = maintenance.database_info(db, config.database.inspection_collections)
        log_database("info", {"Host": db.host, "Database": db.name, "Counts": dict(counts)})


@app.command()
def categories(config_path: Optional[Path] = ConfigOption):
    """Count and list categories."""
    config = _bootstrap(config_path)
    with _database(config) as db:
        rows = maintenance.list_categories(db)
        typer.echo(f"📊 Total categories in MongoDB: {len(rows)}")
        if rows:
            typer.echo("\n📋 Categories:")
            for i, (name, description) in enumerate(rows, start=1):
                typer.echo(f"{i}. {name} - {description}")


@app.command()
def sample(config_path: Optional[Path] = ConfigOption):
    """Print one compact sample document per inspection collection."""
    config = _bootstrap(config_path)
    with _database(config) as db:
        samples = maintenance.sample_documents(
            db,
            config.database.inspection_collections,
            field_limit=config.database.sample_field_limit,
        )
        for name, doc in samples.items():
            if doc is None:
                typer.echo(f"-- {name}: (no documents)")
            elif isinstance(doc, str):
                typer.echo(f"-- {name}: {doc}")
            else:
                log_formatted(f"{name} sample", doc, "database")


@app.command()
def users(
    tokens: bool = typer.Option(False, "--tokens", help="Show each push token with its length and test-token check"),
    config_path: Optional[Path] = ConfigOption,
):
    """List users with their role and push-token status."""
    config = _bootstrap(config_path)
    with _database(config) as db:
        if tokens:
            typer.echo("\n📱 Push Token Details:\n")
            for info in maintenance.list_push_tokens(db):
                typer.echo(f"{info.role.upper()}: {info.email}")
                if info.token:
                    typer.echo(f"  Token: {info.token}")
                    typer.echo(f"  Length: {info.length} chars")
                    typer.echo(f"  Is Test Token: {'YES ❌' if info.is_test_token else 'NO ✅'}")
                else:
                    typer.echo("  Token: NONE")
                typer.echo("")
            return

        rows = maintenance.list_users(db)
        typer.echo(f"Found {len(rows)} users:\n")
        for role, email, has_token in rows:
            token = "✅ HAS TOKEN" if has_token else "❌ NO TOKEN"
            typer.echo(f"{role:<10} {email:<30} {token}")


@app.command()
def booking(
    booking_id: str = typer.Argument(..., help="Booking document _id"),
    config_path: Optional[Path] = ConfigOption,
):
    """
    Show a booking and the push token of the customer who created it.

    Example:
        booking-ops booking 6927f5da6f57714ac972aa7f
    """
    config = _bootstrap(config_path)
    with _database(config) as db:
        details = maintenance.find_booking(db, booking_id)
        if details is None:
            log_warning(f"Booking not found: {booking_id}")
            raise typer.Exit(code=1)

        found = details.booking
        log_formatted("Booking details", {
            "ID": str(found.get("_id")),
            "Booking ID": found.get("bookingId"),
            "Customer": found.get("customerName"),
            "Created By": found.get("createdBy"),
            "Brand": found.get("brand"),
            "Model": found.get("model"),
        }, "database")

        if not details.has_creator:
            log_warning("No createdBy field on booking")
        elif details.customer is None:
            log_warning(f"Creator {found['createdBy']} not found in users")
        else:
            customer = details.customer
            log_formatted("Customer details", {
                "Name": customer.get("name"),
                "Email": customer.get("email"),
                "Push Token": customer.get("pushToken") or "❌ NO TOKEN",
            }, "info")


@app.command("find-user")
def find_user(
    email: str = typer.Argument(..., help="Email address to look up"),
    config_path: Optional[Path] = ConfigOption,
):
    """Print a single user document by email, with secret-looking fields masked."""
    config = _bootstrap(config_path)
    with _database(config) as db:
        user = maintenance.find_user(db, email)
        if user is None:
            log_warning(f"User not found: {email}")
            raise typer.Exit(code=1)
        log_formatted("User found", redact(user), "success")


@app.command()
def clear(
    names: Optional[List[str]] = typer.Argument(None, help="Collections to empty (defaults to the configured list)"),
    execute: bool = typer.Option(False, "--execute", help="Actually delete. Without it, only counts are shown."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    config_path: Optional[Path] = ConfigOption,
):
    """
    Delete ALL documents from the named collections. Irreversible.

    Example:
        booking-ops clear categories brands --execute
    """
    config = _bootstrap(config_path)
    targets = list(names) if names else list(config.database.maintenance_collections)

    with _database(config) as db:
        if not execute:
            counts = maintenance.collection_counts(db, targets, include_empty=True)
            log_formatted("Dry run - nothing deleted", dict(counts), "warning")
            log_info("Re-run with --execute to delete these documents")
            return

        if not yes:
            typer.confirm(
                f"Delete every document in {', '.join(targets)} on {db.host}/{db.name}?",
                abort=True,
            )

        deleted = maintenance.clear_collections(db, targets)
        for name, count in deleted.items():
            typer.echo(f"🗑️  Deleted {count} documents from {name}")
        log_success("Collections cleared!")


@app.command("set-roles")
def set_roles(
    assign: Optional[List[str]] = typer.Option(
        None, "--assign", help="email=role pair; repeat for several users. Overrides the configured list."
    ),
    config_path: Optional[Path] = ConfigOption,
):
    """
    Set Firebase custom claims (roles) for existing users.

    Example:
        booking-ops set-roles --assign admin@example.com=admin --assign staff@example.com=staff
    """
    config = _bootstrap(config_path)

    try:
        if assign:
            assignments = [RoleAssignment.parse(item) for item in assign]
        else:
            assignments = [RoleAssignment(e.email, e.role) for e in config.firebase.role_assignments]
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--assign")

    if not assignments:
        log_error("Nothing to do", ConfigurationError(
            "No role assignments given. Pass --assign email=role or set firebase.role_assignments."
        ))
        raise typer.Exit(code=1)

    try:
        client = initialize_firebase(config.firebase)
    except BookingOpsError as e:
        log_error("Firebase initialization error", e)
        raise typer.Exit(code=1)

    typer.echo("🔧 Setting Firebase custom claims (roles)...\n")
    summary = assign_roles(client, assignments)

    for result in summary.results:
        if result.ok:
            log_success(f'Set role "{result.assignment.role}" for user: {result.assignment.email} (UID: {result.uid})')
        else:
            typer.echo(f"❌ Error setting role for {result.assignment.email}: {result.error}", err=True)

    typer.echo("\n📊 Summary:")
    typer.echo(f"✅ Success: {summary.succeeded}")
    typer.echo(f"❌ Failed: {summary.failed}")
    typer.echo(f"\n💡 Note: {REAUTH_NOTE}")


@app.command("check-booking-webhook")
def check_booking_webhook(
    url: Optional[str] = typer.Option(None, "--url", help="Webhook URL (defaults to N8N_WEBHOOK_URL / config)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    config_path: Optional[Path] = ConfigOption,
):
    """Send a synthetic booking to the booking-email webhook."""
    config = _bootstrap(config_path)
    try:
        passed = run_booking_webhook_check(
            url or config.webhooks.booking_webhook_url,
            timeout=timeout or config.webhooks.timeout_seconds,
        )
    except BookingOpsError as e:
        log_error("Webhook check error", e)
        raise typer.Exit(code=1)
    if not passed:
        raise typer.Exit(code=1)


@app.command("check-email-hook")
def check_email_hook(
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API root (defaults to config)"),
    limit: int = typer.Option(5, "--limit", min=1, help="limit for the logs endpoint"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    config_path: Optional[Path] = ConfigOption,
):
    """Exercise POST /api/email-hook, its logs and its stats endpoints."""
    config = _bootstrap(config_path)
    try:
        results = run_email_hook_checks(
            base_url or config.webhooks.api_base_url,
            timeout=timeout or config.webhooks.timeout_seconds,
            log_limit=limit,
        )
    except BookingOpsError as e:
        log_error("Email hook check error", e)
        raise typer.Exit(code=1)
    if not all_passed(results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
