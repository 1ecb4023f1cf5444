"""
SpendSmart - CLI Entry Point.

Usage:
    spendsmart health              Check configuration and schema
    spendsmart options             Show the onboarding option catalog
    spendsmart status [USER_ID]    Show a user's stored onboarding
    spendsmart serve               Start the API server
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="spendsmart",
    help="SpendSmart - onboarding and preference tools.",
    add_completion=False,
)
console = Console()


@app.command()
def health(
    probe: bool = typer.Option(True, "--probe/--no-probe", help="Probe user_onboarding for optional columns"),
) -> None:
    """Check system health and configuration."""
    from spendsmart.config import get_settings

    console.print("\n[bold]SpendSmart Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.spendsmart_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Local store: {settings.local_store_dir.expanduser()}")

        if not settings.supabase_configured:
            console.print("❌ Supabase URL or key missing")
            raise typer.Exit(1)
        console.print("✅ Supabase configured")

        if probe:
            from onboarding.service import build_reconciler

            reconciler = build_reconciler(settings.dev_user_id)
            complete = asyncio.run(reconciler.probe_schema())
            report = reconciler.schema_capability_report()
            if complete:
                console.print(f"✅ {settings.onboarding_table} schema up to date")
            else:
                console.print(
                    f"⚠️  {settings.onboarding_table} missing columns: "
                    f"{', '.join(report['missing_columns']) or 'unknown'} (legacy saves)"
                )

        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]Health check failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def options() -> None:
    """Print the onboarding option catalog."""
    from onboarding.options import get_form_options
    from onboarding.steps import OnboardingStep

    steps = Table(title="Steps")
    steps.add_column("#", justify="right")
    steps.add_column("Step")
    steps.add_column("Title")
    steps.add_column("Phase", style="dim")
    for step in OnboardingStep:
        steps.add_row(str(step.value), step.name.lower(), step.title, step.visual_phase.value)
    console.print(steps)

    catalog = get_form_options()
    for key, values in catalog.items():
        if not isinstance(values, list):
            continue
        table = Table(title=key.replace("_", " ").title())
        table.add_column("Label")
        table.add_column("Icon", style="dim")
        for option in values:
            table.add_row(option["label"], option["icon"])
        console.print(table)

    console.print(f"Max categories: {catalog['max_category_selections']}")


@app.command()
def status(
    user_id: str = typer.Argument(None, help="User id (defaults to DEV_USER_ID)"),
) -> None:
    """Show a user's stored onboarding row, local backup and completion flag."""
    from spendsmart.config import settings
    from onboarding.errors import OnboardingError
    from onboarding.identity import Identity
    from onboarding.service import build_reconciler

    user_id = user_id or settings.dev_user_id
    reconciler = build_reconciler(user_id)

    try:
        record = asyncio.run(reconciler.fetch_record(Identity(id=user_id)))
    except OnboardingError as e:
        console.print(f"[red]Lookup failed: {e}[/red]")
        record = None

    if record:
        console.print(Panel.fit(record.to_json(), title=f"{settings.onboarding_table} ({user_id})"))
    else:
        console.print(f"[dim]No remote onboarding row for {user_id}[/dim]")

    backup = reconciler.load_local_backup(user_id)
    if backup:
        console.print(Panel.fit(backup.to_json(), title="Local backup", border_style="dim"))
    else:
        console.print("[dim]No local backup[/dim]")

    console.print(f"Onboarding complete flag: {reconciler.is_onboarding_complete()}")
    console.print(f"Preferred currency: {reconciler.currency.preferred_currency}")


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]SpendSmart API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "spendsmart.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from spendsmart import __version__

    console.print(f"SpendSmart version {__version__}")


if __name__ == "__main__":
    app()
