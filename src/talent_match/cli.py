"""Command-line interface for Talent Match."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from talent_match.config import settings
from talent_match.core.errors import is_error
from talent_match.core.models import Role

app = typer.Typer(
    name="talent-match",
    help="Talent Match - job marketplace backend",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Host to bind to"),
    port: int = typer.Option(settings.port, help="Port to bind to"),
    reload: bool = typer.Option(settings.reload, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print(f"🚀 Starting Talent Match on {host}:{port}")
    uvicorn.run(
        "talent_match.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Talent Match Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Show non-sensitive settings
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Storage Backend", settings.storage_backend)
    table.add_row("Database URL", settings.database_url if settings.storage_backend == "sql" else "-")
    table.add_row("JWT Algorithm", settings.jwt_algorithm)
    table.add_row("JWT Expiration (hours)", str(settings.jwt_expiration_hours))
    table.add_row("Default Page Size", str(settings.default_page_size))
    table.add_row("Max Page Size", str(settings.max_page_size))

    console.print(table)


@app.command("create-admin")
def create_admin(
    name: str = typer.Option(..., help="Admin display name"),
    email: str = typer.Option(..., help="Admin email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Admin password"),
) -> None:
    """Create an admin account in the configured store."""
    from talent_match.services.container import build_container

    container = build_container(settings)
    try:
        result = asyncio.run(container.users.register({
            "name": name,
            "email": email,
            "password": password,
            "role": Role.ADMIN.value,
        }))
    finally:
        container.close()

    if is_error(result):
        console.print(f"❌ {result.message}")
        for detail in result.details:
            console.print(f"   - {detail}")
        raise typer.Exit(code=1)

    console.print(f"✅ Admin created: {result.user.email} ({result.user.id})")
    if settings.storage_backend == "memory":
        console.print("⚠️  Memory storage is not persistent; the account is gone on exit")


@app.command()
def version() -> None:
    """Show version information."""
    from talent_match import __version__
    console.print(f"Talent Match v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
