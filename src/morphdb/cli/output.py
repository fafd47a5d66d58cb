"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from morphdb.core.types import AlterResult, TableSnapshot
from morphdb.exceptions import MorphDBError

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            table = Table(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col, "")) for col in columns])
            console.print(table)

    def print_snapshot(self, snapshot: TableSnapshot) -> None:
        """Print a table snapshot with its columns and constraints."""
        if self.json_mode:
            print(json.dumps(snapshot.model_dump(by_alias=True), default=str, indent=2))
            return

        console.print(f"\n[bold]Table:[/bold] {snapshot.name}")

        columns_table = Table(show_header=True, header_style="bold cyan")
        for heading in ("Name", "Type", "Nullable", "Default", "PK", "Unique"):
            columns_table.add_column(heading)
        for column in snapshot.columns:
            columns_table.add_row(
                column.name,
                column.data_type,
                "✓" if column.nullable else "",
                column.default or "",
                "✓" if column.primary_key else "",
                "✓" if column.unique else "",
            )
        console.print(columns_table)

        if snapshot.foreign_keys:
            console.print(f"\n[bold]Foreign keys ({len(snapshot.foreign_keys)}):[/bold]")
            fk_table = Table(show_header=True, header_style="bold cyan")
            for heading in ("Name", "Columns", "References", "On delete", "On update"):
                fk_table.add_column(heading)
            for fk in snapshot.foreign_keys:
                fk_table.add_row(
                    fk.name or "",
                    ", ".join(fk.columns),
                    f"{fk.referred_table}({', '.join(fk.referred_columns)})",
                    fk.on_delete or "",
                    fk.on_update or "",
                )
            console.print(fk_table)

        if snapshot.check_constraints:
            console.print(f"\n[bold]Checks ({len(snapshot.check_constraints)}):[/bold]")
            for check in snapshot.check_constraints:
                console.print(f"  {check.name or '(unnamed)'}: {check.sqltext}")

    def print_alter_result(self, result: AlterResult) -> None:
        """Print the per-edit outcomes of an alter request."""
        if self.json_mode:
            print(json.dumps(result.model_dump(by_alias=True), default=str, indent=2))
            return

        for outcome in result.edits:
            style = "red" if outcome.error else "green"
            line = f"{outcome.column}: {outcome.action}"
            if outcome.error:
                line = f"{line} ({outcome.error['message']})"
            console.print(line, style=style)
        if result.stopped_early:
            console.print("Rename applied; remaining edits were not processed.", style="yellow")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message."""
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.)."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print_json(json.dumps(data, default=str))

    def print_error(self, error: Exception) -> None:
        """Print error message."""
        if self.json_mode:
            if isinstance(error, MorphDBError):
                print(json.dumps(error.to_dict(), default=str, indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, MorphDBError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)
