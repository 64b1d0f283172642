"""Dump the Apiary OpenAPI document for client generators and API docs.

The document comes from ``create_app().openapi()``; building the app opens no
database connection, so this runs without a server or a database.  Only the
documented operations appear: the 405 catch-all routes are excluded from the
schema.

Usage:
    python scripts/export_openapi.py                  # -> ./openapi.json
    python scripts/export_openapi.py --output docs/openapi.json
    python scripts/export_openapi.py --check          # fail if operations lack ids
"""

import json
import sys
from pathlib import Path

import typer
from rich.console import Console

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from apiary.server.main import create_app  # noqa: E402

console = Console()


def export(
    output: Path = typer.Option(project_root / "openapi.json", help="Where to write the document"),
    check: bool = typer.Option(False, help="Exit non-zero if any operation has no operationId"),
) -> None:
    document = create_app().openapi()
    operations = {
        f"{method.upper()} {path}": operation.get("operationId")
        for path, methods in document["paths"].items()
        for method, operation in methods.items()
    }

    missing = sorted(name for name, operation_id in operations.items() if not operation_id)
    if check and missing:
        console.print(f"[red]Operations without an operationId:[/red] {', '.join(missing)}")
        raise typer.Exit(code=1)

    output.write_text(json.dumps(document, indent=2))
    console.print(f"Wrote [bold]{len(operations)}[/bold] operations to {output}")


if __name__ == "__main__":
    typer.run(export)
