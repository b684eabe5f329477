"""Rich-powered console output for rustydocs."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.tree import Tree

from rustydocs.parser.models import CodeElementID, DocumentedCodeElement, UserQuestionResponse


class Console:
    """Terminal output for rustydocs using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def indexing_progress(self) -> Progress:
        """Create a progress bar for parsing."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
        )

    def show_stats(self, stats: dict) -> None:
        """Display repository statistics in a table."""
        table = Table(title="Code Element Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Files", str(stats.get("files", 0)))
        table.add_row("Elements", str(stats.get("elements", 0)))
        table.add_row("Functions", str(stats.get("functions", 0)))
        table.add_row("Types", str(stats.get("types", 0)))
        table.add_row("Traits", str(stats.get("traits", 0)))
        table.add_row("Total Edges", str(stats.get("total_edges", 0)))

        edge_types = stats.get("edge_types", {})
        if edge_types:
            table.add_section()
            for kind, count in sorted(edge_types.items(), key=lambda x: -x[1]):
                table.add_row(f"  {kind} edges", str(count))

        self.console.print(table)

    def show_references(
        self,
        element_id: CodeElementID,
        implementors: list[CodeElementID],
        dependencies: list[CodeElementID],
    ) -> None:
        """Display who references an element and what it references."""
        tree = Tree(f"[bold cyan]{element_id}[/bold cyan]")
        used_by = tree.add("[bold]referenced by[/bold]")
        for implementor in implementors:
            used_by.add(f"{implementor.kind.value} [cyan]{implementor.qualified_path}[/cyan]")
        uses = tree.add("[bold]references[/bold]")
        for dependency in dependencies:
            uses.add(f"{dependency.kind.value} [cyan]{dependency.qualified_path}[/cyan]")
        self.console.print(tree)

    def show_answer(self, answer: UserQuestionResponse) -> None:
        self.console.print(
            Panel(
                Markdown(answer.response),
                title="[bold green]Answer[/bold green]",
                border_style="green",
            )
        )
        if answer.suggested_questions:
            self.console.print("\n[bold]You could also ask:[/bold]")
            for question in answer.suggested_questions:
                self.console.print(f"  [cyan]-[/cyan] {question}")

    def show_documentation(self, records: list[DocumentedCodeElement]) -> None:
        table = Table(title="Generated Documentation", border_style="cyan")
        table.add_column("Kind", style="dim")
        table.add_column("Element", style="bold")
        table.add_column("Description")
        for record in records:
            path = f"{record.location} :: {record.ident}" if record.location else record.ident
            summary = record.general_description.strip().split("\n", 1)[0]
            table.add_row(record.kind, path, summary)
        self.console.print(table)
