"""MorphDB CLI - Main entry point."""

from typing import Annotated

import typer

import morphdb
from morphdb.cli.commands import tables
from morphdb.cli.context import CLIContext, get_database_url

app = typer.Typer(
    name="morphdb",
    help="MorphDB CLI - runtime-defined tables over HTTP",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="MORPHDB_DATABASE_URL",
            help="Database URL (PostgreSQL or SQLite)",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    ctx.obj = CLIContext(
        database_url=get_database_url(database),
        echo=echo,
        json_output=json_output,
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"MorphDB v{morphdb.__version__}")


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port")] = None,
) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from morphdb.api import create_app
    from morphdb.config import get_settings

    cli_ctx: CLIContext = ctx.obj
    settings = get_settings()
    settings = settings.model_copy(
        update={"DATABASE_URL": cli_ctx.database_url, "ECHO_SQL": cli_ctx.echo or settings.ECHO_SQL}
    )
    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.API_HOST,
        port=port or settings.API_PORT,
    )


app.add_typer(tables.app, name="table")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
