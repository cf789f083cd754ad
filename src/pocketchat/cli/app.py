"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from ..gateway import OllamaGateway
from ..transcript import TranscriptStore
from .providers import get_chat_settings, get_gateway

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="pocketchat",
    help="Chat with a local language model: embedded llama.cpp, Ollama, or an OpenAI-compatible API",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

BACKEND_HELP = "Backend: embedded, ollama, or openai (default: $CHAT_BACKEND or ollama)"
MODEL_HELP = "Model name, or GGUF path for the embedded backend"


def _console_debug(level: str, component: str, message: str) -> None:
    """Route store debug messages to the console."""
    colors = {"debug": "dim", "info": "cyan", "warning": "yellow", "error": "red"}
    color = colors.get(level, "white")
    console.print(f"[{color}]{level.upper():<7}[{component}] {message}[/{color}]", highlight=False)


@app.command(name="tui")
def tui_command(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    async def _tui():
        from ..ui import run_textual_tui

        gateway = get_gateway(backend, model, console)
        system_prompt, window = get_chat_settings(console)
        try:
            await run_textual_tui(
                gateway=gateway,
                system_prompt=system_prompt,
                context_window=window,
                log_level=log_level,
            )
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def chat(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug messages"),
):
    """Interactive line-based chat in the terminal."""
    async def _chat():
        gateway = get_gateway(backend, model, console)
        system_prompt, window = get_chat_settings(console)

        try:
            with console.status(f"[dim]Initializing {gateway.backend_type} backend...[/dim]"):
                await gateway.initialize()
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            await gateway.cleanup()
            raise typer.Exit(code=1)

        store = TranscriptStore(
            gateway,
            system_prompt=system_prompt,
            context_window=window,
            debug_callback=_console_debug if verbose else None,
        )

        try:
            console.print(f"[bold cyan]PocketChat[/bold cyan] [dim]({gateway.backend_type} | {gateway.model})[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")
            for turn in store.history:
                console.print(f"[bold green]Assistant:[/bold green] {turn.text}\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    with console.status("[dim]Thinking...[/dim]"):
                        reply = await store.send(user_input)

                    if reply is None:
                        continue

                    console.print("[bold green]Assistant:[/bold green]")
                    console.print(Markdown(reply.text))
                    console.print()

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
        finally:
            await gateway.cleanup()

    asyncio.run(_chat())


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug messages"),
):
    """Send a single message and print the reply."""
    async def _ask() -> bool:
        gateway = get_gateway(backend, model, console)
        system_prompt, window = get_chat_settings(console)
        try:
            await gateway.initialize()
            store = TranscriptStore(
                gateway,
                system_prompt=system_prompt,
                context_window=window,
                greeting=None,
                debug_callback=_console_debug if verbose else None,
            )
            reply = await store.send(prompt)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            return False
        finally:
            await gateway.cleanup()

        if reply is None:
            console.print("[red]Error: prompt is empty[/red]")
            return False

        console.print(reply.text, markup=False, highlight=False)
        return store.last_error is None

    if not asyncio.run(_ask()):
        raise typer.Exit(code=1)


@app.command()
def health(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
):
    """Check backend configuration and readiness."""
    async def _health() -> bool:
        gateway = get_gateway(backend, model, console)
        system_prompt, window = get_chat_settings(console)

        table = Table(title="PocketChat Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Backend", gateway.backend_type)
        table.add_row("Model", gateway.model)
        table.add_row("System prompt", system_prompt)
        table.add_row("Context window", str(window) if gateway.backend_type != "ollama" else "latest message only")
        console.print(table)

        try:
            await gateway.initialize()
            if isinstance(gateway, OllamaGateway):
                available = await gateway.list_models()
                if not any(name.split(":")[0] == gateway.model.split(":")[0] for name in available):
                    console.print(f"[yellow]![/yellow] Model '{gateway.model}' not pulled on {gateway.base_url}")
                    return False
            console.print(f"[green]+[/green] {gateway.backend_type} backend: OK")
            return True
        except Exception as e:
            console.print(f"[red]x[/red] {gateway.backend_type} backend: FAILED ({e})")
            return False
        finally:
            await gateway.cleanup()

    if not asyncio.run(_health()):
        raise typer.Exit(code=1)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
