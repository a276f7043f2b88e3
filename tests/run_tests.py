#!/usr/bin/env python3
import sys

import pytest
from rich.console import Console
from rich.panel import Panel
from rich.table import Table


def run_test_category(console, name, marker):
    """Run tests for a specific category and report whether they passed."""
    console.print(f"\n[bold blue]Running {name}[/]")
    result = pytest.main(["-v", f"-m={marker}", "--disable-warnings", "tests"])
    # 5 = no tests collected for this marker
    return result in (0, 5)


def main():
    console = Console()
    console.print(Panel.fit("[bold magenta]ONR worker test suite[/]", border_style="blue"))

    categories = [
        ("Unit Tests", "unit"),
        ("Integration Tests", "integration"),
        ("End-to-End Tests", "e2e"),
    ]

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Result")

    success = True
    for name, marker in categories:
        passed = run_test_category(console, name, marker)
        success = success and passed
        table.add_row(name, "[green]passed[/]" if passed else "[red]failed[/]")

    console.print(table)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
