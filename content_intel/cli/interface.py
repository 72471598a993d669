"""
Prompt-driven CLI interface
Runs single prompts or an interactive loop against the orchestrator
"""
from typing import Callable, Optional
from loguru import logger
from rich.console import Console

from content_intel.cli.display import ResultRenderer
from content_intel.services.orchestrator import Orchestrator

EXIT_COMMAND = "exit"


class CLIInterface:
    """Console front-end for the orchestrator"""

    def __init__(
        self,
        orchestrator: Orchestrator,
        console: Optional[Console] = None,
        verbose: bool = False,
        read_input: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize CLI interface

        Args:
            orchestrator: Workflow engine
            console: Rich console used for output (if None, will create new)
            verbose: Show previews and stack traces
            read_input: Line reader for interactive mode (defaults to the console prompt)
        """
        self.orchestrator = orchestrator
        self.console = console or Console()
        self.verbose = verbose
        self.renderer = ResultRenderer(self.console, verbose=verbose)
        self.read_input = read_input or (lambda: self.console.input("[cyan]> [/cyan]"))

    def start_interactive_mode(self) -> None:
        """Read prompts until 'exit' or end of input; errors never end the loop"""
        self.console.print("[bold blue]Content Intelligence CLI[/bold blue]")
        self.console.print(f'[dim]Enter your natural language prompts. Type "{EXIT_COMMAND}" to quit.[/dim]\n')

        while True:
            try:
                prompt = self.read_input()
            except (EOFError, KeyboardInterrupt):
                break

            if prompt.strip().lower() == EXIT_COMMAND:
                break

            if prompt.strip():
                self.process_prompt(prompt)

            self.console.print()

        self.console.print("[yellow]Goodbye![/yellow]")

    def process_prompt(self, prompt: str) -> bool:
        """
        Process one prompt and print the outcome

        Returns:
            True if the prompt succeeded, False if it failed
        """
        try:
            with self.console.status("Processing your request..."):
                processed = self.orchestrator.process_prompt(prompt)
        except Exception as e:
            logger.debug(f"Prompt failed: {e}")
            self.console.print("[red]Request failed[/red]")
            self.console.print(f"[red]Error:[/red] {e}")
            if self.verbose:
                self.console.print_exception()
            return False

        self.console.print("[green]Request processed successfully![/green]")
        self.renderer.render(processed)
        return True
