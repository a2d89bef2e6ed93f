"""CLI commands for the tarot oracle."""

import asyncio

import click
import structlog
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from cli.config import load_config_model
from cli.logging_config import setup_logging

console = Console()
logger = structlog.get_logger()

_SECTION_TITLES = {
    "saludo": "Saludo",
    "pasado": "Pasado",
    "presente": "Presente",
    "futuro": "Futuro",
    "sintesis": "Síntesis",
    "consejo": "Consejo",
}


@click.group()
@click.version_option(version="3.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Tarot oracle - conversational readings backend."""
    config = load_config_model()
    setup_logging(
        json_mode=config.logging.json_mode,
        level="DEBUG" if verbose else config.logging.level,
    )
    ctx.obj = config


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("web.app:app", host=host, port=port, reload=reload)


@cli.command()
@click.argument("count", default=3, type=int)
@click.option("--seed", type=int, help="Seed for a reproducible spread")
def draw(count: int, seed: int | None):
    """Draw COUNT cards and show them."""
    import random

    from oracle import CardPool

    pool = CardPool(rng=random.Random(seed) if seed is not None else None)
    table = Table(title=f"{count} cartas")
    table.add_column("#", justify="right")
    table.add_column("Carta")
    table.add_column("Orientación")
    table.add_column("Posición")
    for i, card in enumerate(pool.draw(count), 1):
        table.add_row(
            str(i), card.name, card.orientation.label, card.position_label or f"Posición {i}"
        )
    console.print(table)


async def _ask(config, question: str, user_id: str | None):
    from oracle import ChatRequest, NoDelay
    from oracle.tasks import drain_background
    from web.deps import (
        build_orchestrator,
        get_cheap_provider,
        get_provider,
        get_reading_store,
        get_session_cache,
    )

    orchestrator = build_orchestrator(
        config,
        get_provider(),
        get_cheap_provider(),
        get_reading_store(),
        get_session_cache(),
        pacer=NoDelay(),
    )
    request = ChatRequest(question=question, user_id=user_id, conversation_id="cli")
    reply = await orchestrator.handle_message(request)

    if reply["type"] != "ready_for_reading":
        console.print(Panel(reply["text"], title="Oráculo", border_style="magenta"))
        await drain_background(timeout=10.0)
        return

    request.context_summary = reply.get("contextSummary")
    request.memory_context = reply.get("memoryContext")
    async for event, data in orchestrator.stream_interpretation(request):
        if event == "section":
            title = _SECTION_TITLES.get(data["section"], data["section"])
            style = "dim" if data["isTeaser"] else "cyan"
            console.print(Panel(Markdown(data["text"]), title=title, border_style=style))
        elif event == "interpretation":
            cards = ", ".join(c["name"] for c in data["cards"])
            console.print(f"[dim]Cartas: {cards}[/]")
            if not data["sectioned"]:
                console.print(Markdown(data["text"]))
        elif event == "title":
            console.print(f"[bold]{data['title']}[/]")
        elif event == "error":
            console.print(f"[red]{data['error']}[/]")
    if reply.get("ctaMessage"):
        console.print(f"[yellow]{reply['ctaMessage']}[/]")
    await drain_background(timeout=10.0)


@cli.command()
@click.argument("question")
@click.option("--user", "user_id", help="Consultant id (anonymous when omitted)")
@click.pass_obj
def ask(config, question: str, user_id: str | None):
    """Ask a question and print the reading."""
    from llm import LLMError
    from oracle import OracleError

    try:
        asyncio.run(_ask(config, question, user_id))
    except (OracleError, LLMError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1)


@cli.command()
@click.argument("user_id")
@click.option("--premium/--no-premium", default=False, help="Premium plan")
@click.option("--future/--no-future", default=False, help="May see the future sections")
@click.option("--plan", default="Gratuito", help="Plan name")
@click.pass_obj
def grant(config, user_id: str, premium: bool, future: bool, plan: str):
    """Set a user's reading permissions."""
    from memory import SQLiteReadingStore

    store = SQLiteReadingStore(config.paths.db_path)
    store.set_reading_permissions(user_id, is_premium=premium, can_see_future=future, plan_name=plan)
    console.print(f"[green]Permisos actualizados para {user_id}[/]")


@cli.command()
@click.argument("user_id")
@click.pass_obj
def memory(config, user_id: str):
    """Show what the oracle remembers about a user."""
    from memory import SQLiteReadingStore

    store = SQLiteReadingStore(config.paths.db_path)
    entries = store.list_memory_entries(user_id)
    if not entries:
        console.print("[yellow]Sin memoria para este usuario.[/]")
        return
    table = Table(title=f"Memoria de {user_id}")
    table.add_column("Capa")
    table.add_column("Categoría")
    table.add_column("Clave")
    table.add_column("Valor")
    for e in entries:
        table.add_row(e.layer.value, e.category.value, e.key, e.value)
    console.print(table)


if __name__ == "__main__":
    cli()
