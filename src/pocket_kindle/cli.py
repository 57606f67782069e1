"""pocket-kindle CLI - Main entry point."""

import asyncio
import json
import logging
import webbrowser
from typing import Any, Awaitable, Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .app import App, build_app
from .errors import PocketKindleError
from .models import Article
from .readability.worker import LocalReadabilityWorker

app = typer.Typer(
    name="pocket-kindle",
    help="Send Pocket articles to your Kindle",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: int = typer.Option(
        0,
        "--verbose", "-v",
        count=True,
        help="Log progress (-vv for debug output)",
    ),
):
    """Pocket to Kindle."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _run(body: Callable[[App], Awaitable[Any]]) -> Any:
    """Run an async command body against a fresh app, mapping errors to exit 1."""

    async def _main():
        async with build_app() as application:
            return await body(application)

    try:
        return asyncio.run(_main())
    except PocketKindleError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        if e.details:
            console.print(f"[dim]Details: {e.details}[/dim]")
        raise typer.Exit(1)
    except asyncio.TimeoutError:
        console.print("[red]Error: Authorization timed out. Please try again.[/red]")
        raise typer.Exit(1)


def _require_login(application: App) -> None:
    if not application.pocket.is_login():
        console.print("[yellow]Not logged in. Run 'pocket-kindle login' first.[/yellow]")
        raise typer.Exit(1)


def _articles_table(articles: list[Article]) -> Table:
    table = Table(title=f"Pocket ({len(articles)} articles)")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("URL", style="dim")
    for article in articles:
        table.add_row(article.id, article.title or "-", article.url)
    return table


@app.command("status")
def status():
    """Show Pocket session status."""

    async def _status(application: App) -> dict[str, Any]:
        return application.session.get_status()

    info = _run(_status)

    if info["logged_in"]:
        console.print(
            Panel(
                "[bold green]Logged in[/bold green]\n\n"
                f"State file: {info['state_file']}",
                title="Pocket Status",
            )
        )
    else:
        console.print(
            Panel(
                "[bold yellow]Not logged in[/bold yellow]\n\n"
                "Run 'pocket-kindle login' to connect your Pocket account.",
                title="Pocket Status",
            )
        )


@app.command("login")
def login(
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Print the consent URL instead of opening it"
    ),
    timeout: int = typer.Option(300, "--timeout", "-t", help="Max seconds to wait"),
):
    """Connect your Pocket account.

    Opens the Pocket consent page and waits for the redirect back to the
    local callback address. The session is saved once a test request works.
    """

    async def _login(application: App) -> bool:
        if application.pocket.is_login():
            return False

        auth_url = await application.pocket.start_login()
        if auth_url is None:
            return False

        console.print(
            Panel(
                "[bold]Authorize pocket-kindle[/bold]\n\n"
                f"{auth_url}",
                title="Pocket Login",
            )
        )
        if not no_browser:
            webbrowser.open(auth_url)

        await asyncio.wait_for(application.pocket.list(count=1), timeout)
        return True

    if _run(_login):
        console.print("[green]Login successful. Session saved.[/green]")
    else:
        console.print("[yellow]Already logged in.[/yellow]")


@app.command("logout")
def logout():
    """Forget the saved Pocket session."""

    async def _logout(application: App) -> bool:
        return await application.pocket.logout()

    if _run(_logout):
        console.print("[green]Logged out.[/green]")
    else:
        console.print("[dim]Already logged out.[/dim]")


@app.command("list")
def list_articles(
    count: int = typer.Option(None, "--count", "-n", help="Max articles to list"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List unread Pocket articles, newest first."""

    async def _list(application: App) -> list[Article]:
        _require_login(application)
        return await application.pocket.list(count=count)

    articles = _run(_list)

    if json_output:
        console.print_json(json.dumps([a.to_dict() for a in articles], default=str))
        return

    if not articles:
        console.print("[dim]No articles.[/dim]")
        return
    console.print(_articles_table(articles))


@app.command("send")
def send(
    item_ids: list[str] = typer.Argument(..., help="Pocket item IDs to send"),
):
    """Send Pocket articles to your Kindle."""

    async def _send(application: App) -> tuple[list[Article], str]:
        _require_login(application)
        service = application.send_to_kindle

        articles = await application.pocket.list()
        by_id = {a.id: a for a in articles}
        missing = [i for i in item_ids if i not in by_id]
        if missing:
            console.print(f"[yellow]Skipping unknown items: {', '.join(missing)}[/yellow]")

        selected = [by_id[i] for i in item_ids if i in by_id]
        with LocalReadabilityWorker(application.channel):
            sent = await service.send(selected)
        return sent, application.settings.send_to_kindle_email

    sent, address = _run(_send)

    if not sent:
        console.print("[dim]Nothing to send.[/dim]")
        return
    console.print(f"[green]Sent {len(sent)} article(s) to {address}.[/green]")


if __name__ == "__main__":
    app()
