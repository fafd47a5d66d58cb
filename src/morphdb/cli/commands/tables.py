"""Table management commands."""

from typing import Annotated

import typer

from morphdb.cli.context import CLIContext
from morphdb.cli.output import OutputFormatter
from morphdb.cli.parsing import parse_column_spec, read_json_file

# Create table subcommand group
app = typer.Typer(help="Manage runtime-defined tables")


@app.command("list")
def table_list(ctx: typer.Context) -> None:
    """List all tables in the database."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        snapshots = cli_ctx.get_db().list_tables()

        if cli_ctx.json_output:
            formatter.print_data([s.model_dump(by_alias=True) for s in snapshots])
        else:
            table_data = [
                {
                    "Name": s.name,
                    "Columns": len(s.columns),
                    "Foreign keys": len(s.foreign_keys),
                }
                for s in snapshots
            ]
            formatter.print_table(
                f"Tables ({len(snapshots)} total)",
                table_data,
                ["Name", "Columns", "Foreign keys"],
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("describe")
def table_describe(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
) -> None:
    """Show columns and constraints of a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        formatter.print_snapshot(cli_ctx.get_db().describe_table(name))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("create")
def table_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    columns: Annotated[
        list[str] | None,
        typer.Option(
            "--column",
            "-c",
            help="Column spec: name:type[:modifier]. Can be repeated.",
        ),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", help="Load the table description from a JSON file"),
    ] = None,
) -> None:
    """Create a table.

    Examples:

        # Inline columns
        morphdb table create users --column "email:text:notnull:unique" --column "age:integer"

        # From JSON file ({"name": ..., "columns": [...]}, same shape as POST /table)
        morphdb table create users --from-file users.json
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        table_name = name
        if from_file:
            spec = read_json_file(from_file)
            table_name = spec.get("name", name)
            parsed_columns = spec.get("columns", [])
        else:
            parsed_columns = [parse_column_spec(c) for c in columns or []]

        snapshot = cli_ctx.get_db().create_table(table_name, parsed_columns)
        formatter.print_success(
            f"Table '{snapshot.name}' created",
            {"name": snapshot.name, "columns": snapshot.column_names},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("rename")
def table_rename(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Current table name")],
    new_name: Annotated[str, typer.Argument(help="New table name")],
) -> None:
    """Rename a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        snapshot = cli_ctx.get_db().rename_table(name, new_name)
        formatter.print_success(f"Table '{name}' renamed to '{snapshot.name}'")
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("alter")
def table_alter(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    from_file: Annotated[
        str,
        typer.Option(
            "--from-file",
            help='JSON file with {"columns": [{"colName": ..., "updatedValues": {...}}]}',
        ),
    ],
) -> None:
    """Apply column edits to a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        body = read_json_file(from_file)
        edits = body.get("columns", []) if isinstance(body, dict) else body
        formatter.print_alter_result(cli_ctx.get_db().alter_table(name, edits))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("drop")
def table_drop(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    force: Annotated[
        bool,
        typer.Option("--force", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Drop a table and all of its records."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    if not force and not cli_ctx.json_output:
        confirm = typer.confirm(f"Are you sure you want to drop table '{name}'?")
        if not confirm:
            typer.echo("Cancelled.")
            raise typer.Exit(code=0)

    try:
        cli_ctx.get_db().drop_table(name)
        formatter.print_success(f"Table '{name}' dropped")
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
