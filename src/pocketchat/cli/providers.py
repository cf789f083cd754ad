"""Gateway factory functions for CLI.

Centralizes creation of the inference gateway and chat settings from
environment variables. Hides configuration details from command
implementations.
"""

import os

import typer
from rich.console import Console

from ..gateway import InferenceGateway, create_inference_gateway
from ..transcript import DEFAULT_CONTEXT_WINDOW, DEFAULT_SYSTEM_PROMPT

# Default console for output
_console = Console()

DEFAULT_BACKEND = "ollama"


def get_gateway(
    backend: str | None = None,
    model: str | None = None,
    console: Console | None = None,
) -> InferenceGateway:
    """Create the inference gateway from environment variables.

    Args:
        backend: Backend override (falls back to CHAT_BACKEND)
        model: Model override (model name, or GGUF path for embedded)
        console: Optional Rich console for output

    Returns:
        Gateway instance, not yet initialized

    Raises:
        typer.Exit: If the backend is unknown or required settings are missing

    Environment variables:
        CHAT_BACKEND: embedded, ollama or openai (default: ollama)
        LLAMA_MODEL_PATH: GGUF model file (required for embedded)
        LLAMA_N_CTX: Context size for embedded (default: 2048)
        OLLAMA_BASE_URL: Ollama server URL (default: http://localhost:11434)
        OLLAMA_MODEL: Ollama model (default: llama3.2)
        OPENAI_API_KEY: API key (required for openai)
        OPENAI_BASE_URL: OpenAI-compatible server URL (optional)
        OPENAI_CHAT_MODEL: Model (default: gpt-4o-mini)
    """
    con = console or _console
    backend_name = (backend or os.getenv("CHAT_BACKEND", DEFAULT_BACKEND)).lower()

    try:
        if backend_name == "embedded":
            model_path = model or os.getenv("LLAMA_MODEL_PATH")
            if not model_path:
                con.print("[red]Error: LLAMA_MODEL_PATH not set (or pass --model)[/red]")
                raise typer.Exit(code=1)
            return create_inference_gateway(
                "embedded",
                model_path=model_path,
                n_ctx=int(os.getenv("LLAMA_N_CTX", "2048")),
            )

        if backend_name == "ollama":
            return create_inference_gateway(
                "ollama",
                base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
                model=model or os.getenv("OLLAMA_MODEL", "llama3.2"),
            )

        if backend_name == "openai":
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                con.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
                raise typer.Exit(code=1)
            return create_inference_gateway(
                "openai",
                api_key=api_key,
                base_url=os.getenv("OPENAI_BASE_URL") or None,
                model=model or os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
            )
    except ImportError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    except ValueError as e:
        con.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)

    con.print(f"[red]Error: Unknown backend: {backend_name}[/red]")
    con.print("[dim]Supported backends: embedded, ollama, openai[/dim]")
    raise typer.Exit(code=1)


def get_chat_settings(console: Console | None = None) -> tuple[str, int]:
    """Read the system prompt and context window.

    Environment variables:
        CHAT_SYSTEM_PROMPT: System instruction (default: "You are a helpful AI assistant.")
        CHAT_CONTEXT_WINDOW: Recent turns sent as context (default: 5)
    """
    con = console or _console
    system_prompt = os.getenv("CHAT_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)
    raw_window = os.getenv("CHAT_CONTEXT_WINDOW", str(DEFAULT_CONTEXT_WINDOW))
    try:
        window = int(raw_window)
    except ValueError:
        window = -1
    if window < 0:
        con.print(f"[red]Error: CHAT_CONTEXT_WINDOW must be a non-negative integer, got {raw_window!r}[/red]")
        raise typer.Exit(code=1)
    return system_prompt, window
