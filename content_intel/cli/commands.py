"""
Command-line entry point

Usage:
    content-intel run "Crawl https://example.com"
    content-intel run --interactive
    content-intel fetch --url https://example.com --output page.json
    content-intel enrich --file page.json --type summary
    content-intel organize --file page.json --categories tech,science
    content-intel analyze --file page.json --query "What is it about?"
"""
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from content_intel.cli.interface import CLIInterface
from content_intel.config import get_settings
from content_intel.services.content_tools import ENRICHMENT_TYPES, ContentToolsService
from content_intel.services.knowledge_store import KnowledgeStore
from content_intel.services.orchestrator import Orchestrator
from content_intel.utils import setup_logger

app = typer.Typer(
    help="AI-powered content intelligence CLI",
    no_args_is_help=True,
)

console = Console()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _emit(content, output: Optional[Path], tools: ContentToolsService) -> None:
    if output:
        tools.save_content(content, output)
        console.print(f"Saved to {output}")
    else:
        typer.echo(content.model_dump_json(indent=2, exclude_none=True))


@app.command()
def run(
    prompt: Optional[str] = typer.Argument(None, help="Natural language prompt for a content intelligence task"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Start interactive mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """
    Route a natural-language prompt to a workflow.

    Without a prompt (or with --interactive) starts a prompt loop; type "exit" to quit.
    """
    settings = get_settings()
    setup_logger(settings.log_level, verbose=verbose)

    try:
        settings.validate()
        store = KnowledgeStore(settings=settings).open()
    except Exception as e:
        logger.debug(f"Startup failed: {e}")
        _fail(str(e))

    try:
        cli = CLIInterface(Orchestrator(store, settings=settings), console=console, verbose=verbose)
        if interactive or not prompt:
            cli.start_interactive_mode()
        elif not cli.process_prompt(prompt):
            raise typer.Exit(code=1)
    finally:
        store.close()


@app.command()
def fetch(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="URL to fetch"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Local text file to load"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Fetch content from a URL or file into a JSON content document."""
    setup_logger(get_settings().log_level)
    tools = ContentToolsService()

    try:
        if url:
            console.print(f"Fetching content from URL: {url}")
            content = tools.fetch_from_url(url)
        elif file:
            console.print(f"Reading content from file: {file}")
            content = tools.fetch_from_file(file)
        else:
            _fail("Either --url or --file must be provided")
        _emit(content, output, tools)
    except typer.Exit:
        raise
    except Exception as e:
        _fail(f"Error during content fetch: {e}")


@app.command()
def enrich(
    file: Path = typer.Option(..., "--file", "-f", help="JSON content document"),
    type_: str = typer.Option("summary", "--type", "-t", help=f"One of: {', '.join(ENRICHMENT_TYPES)}"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Append a summary, keywords or sentiment enrichment to a content document."""
    setup_logger(get_settings().log_level)
    if type_ not in ENRICHMENT_TYPES:
        _fail(f"Unknown enrichment type: {type_}")

    tools = ContentToolsService()
    try:
        content = tools.load_content(file)
        console.print(f"Enriching content with {type_}")
        _emit(tools.enrich(content, type_), output, tools)
    except Exception as e:
        _fail(f"Error during content enrichment: {e}")


@app.command()
def organize(
    file: Path = typer.Option(..., "--file", "-f", help="JSON content document"),
    categories: str = typer.Option(..., "--categories", "-c", help="Comma-separated category names"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Categorize a content document into the given categories."""
    setup_logger(get_settings().log_level)
    names = [name.strip() for name in categories.split(',') if name.strip()]
    if not names:
        _fail("--categories must name at least one category")

    tools = ContentToolsService()
    try:
        content = tools.load_content(file)
        _emit(tools.organize(content, names), output, tools)
    except Exception as e:
        _fail(f"Error during content organization: {e}")


@app.command()
def analyze(
    file: Path = typer.Option(..., "--file", "-f", help="JSON content document"),
    query: str = typer.Option(..., "--query", "-q", help="Question to answer about the content"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout"),
) -> None:
    """Answer a query about a content document."""
    setup_logger(get_settings().log_level)
    tools = ContentToolsService()
    try:
        content = tools.load_content(file)
        _emit(tools.analyze(content, query), output, tools)
    except Exception as e:
        _fail(f"Error during content analysis: {e}")


def main() -> None:
    app()
