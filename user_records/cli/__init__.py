"""Main CLI application module."""

import typer
from rich.console import Console
from rich.panel import Panel

from user_records.app.runtime.config.config_data import ConfigData
from user_records.app.runtime.context import get_config, with_context

console = Console()

app = typer.Typer(
    help="User Records service CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Host to bind the server to"),
    port: int | None = typer.Option(None, help="Port to bind the server to"),
    backend: str | None = typer.Option(
        None, help="Storage backend: memory or database"
    ),
    log_level: str = typer.Option(
        "info", help="Uvicorn log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """
    Start the HTTP API server.

    SIGINT and SIGTERM trigger a graceful shutdown that waits up to
    app.shutdown_timeout seconds for in-flight requests.
    """
    import uvicorn

    override = ConfigData()
    if backend is not None:
        if backend not in ("memory", "database"):
            raise typer.BadParameter("backend must be 'memory' or 'database'")
        override.storage.backend = backend  # type: ignore[assignment]

    with with_context(override):
        from user_records.app.api.http.app import create_app

        config = get_config()
        bind_host = host or config.app.host
        bind_port = port or config.app.port

        console.print(
            Panel.fit(
                f"[bold green]Starting User Records API[/bold green]\n"
                f"http://{bind_host}:{bind_port} "
                f"(storage: [cyan]{config.storage.backend}[/cyan])",
                border_style="green",
            )
        )

        uvicorn.run(
            create_app(),
            host=bind_host,
            port=bind_port,
            log_level=log_level,
            access_log=False,
            timeout_graceful_shutdown=config.app.shutdown_timeout,
        )


@app.command("init-db")
def init_db_command() -> None:
    """Create the database tables used by the database storage backend."""
    from user_records.app.runtime.init_db import init_db

    init_db()
    console.print("[green]Database tables created[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
