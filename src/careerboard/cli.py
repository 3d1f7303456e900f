"""Command-line interface for careerboard."""

import typer
from rich.console import Console
from rich.table import Table

from careerboard.config import settings

app = typer.Typer(
    name="careerboard",
    help="careerboard - job listings, applications and recommendations",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, help="Host to bind to"),
    port: int = typer.Option(settings.api_port, help="Port to bind to"),
    reload: bool = typer.Option(settings.reload, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print(f"Starting careerboard on {host}:{port}")
    uvicorn.run(
        "careerboard.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="careerboard Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Follow-up Threshold (days)", str(settings.follow_up_threshold_days))
    table.add_row("Recommendation Limit", str(settings.recommendation_limit))
    table.add_row("Recommendation Target", str(settings.recommendation_target))
    table.add_row("Dashboard Recommendations", str(settings.dashboard_recommendation_limit))
    table.add_row("Jobs Page Size", str(settings.jobs_page_size))
    table.add_row("Applications Page Size", str(settings.applications_page_size))
    table.add_row("Top Categories", str(settings.top_categories_limit))
    table.add_row("API Address", f"{settings.api_host}:{settings.api_port}")
    table.add_row("User Id Header", settings.user_id_header)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from careerboard import __version__
    console.print(f"careerboard v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
