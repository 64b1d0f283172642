"""Apiary CLI - run the server and mint development tokens.

Entry point registered in pyproject.toml:
    apiary = "apiary.cli:app"

Commands:
    apiary serve         - run the HTTP server with uvicorn
    apiary issue-token   - sign a bearer token for a subject (development only)

Usage:
    apiary --help
    APIARY_DATABASE_URL=sqlite+aiosqlite:///apiary.db APIARY_CREATE_SCHEMA=true apiary serve
    apiary issue-token google-oauth2-1234 --ttl-minutes 30
"""

from __future__ import annotations

import datetime
import logging

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel

from apiary.config import get_settings
from apiary.identity import IdentityVerifier

app = typer.Typer(
    name="apiary",
    help="Apiary CLI - hive and queen records service",
    no_args_is_help=True,
)

# Module-level console used by the commands
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: int = typer.Option(8080, envvar="PORT", help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes (development)"),
) -> None:
    """Run the Apiary HTTP server."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console.print(f"[bold green]Apiary[/bold green] listening on {host}:{port}")
    uvicorn.run(
        "apiary.server.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("issue-token")
def issue_token(
    subject: str = typer.Argument(..., help="Subject identifier to put in the 'sub' claim"),
    ttl_minutes: int = typer.Option(60, min=1, help="Token lifetime in minutes"),
) -> None:
    """Sign a bearer token with the configured identity secret.

    For local development and manual testing only; production tokens come
    from the identity provider.
    """
    verifier = IdentityVerifier.from_settings(get_settings())
    token = verifier.create_token(subject, ttl=datetime.timedelta(minutes=ttl_minutes))
    console.print(
        Panel(
            token,
            title=f"Bearer token for [bold]{subject}[/bold]",
            subtitle=f"expires in {ttl_minutes} min",
        )
    )
