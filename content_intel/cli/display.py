"""
Console rendering of workflow results
"""
from typing import List, assert_never
from rich.console import Console

from content_intel.models import (
    ContentRecord,
    CrawlResult,
    FullAnalysisResult,
    KnowledgeBaseResult,
    ProcessedPrompt,
    QueryResult,
    SummarizeResult,
    TakeawaysResult,
)


class ResultRenderer:
    """Prints a ProcessedPrompt in a per-action layout"""

    def __init__(self, console: Console, verbose: bool = False):
        self.console = console
        self.verbose = verbose

    def render(self, processed: ProcessedPrompt) -> None:
        intent = processed.intent
        self.console.print("\n[bold green]Results:[/bold green]")
        self.console.print(
            f"[blue]Intent: {intent.action.value} (confidence: {intent.confidence * 100:.1f}%)[/blue]"
        )
        self.console.print(f"[dim]Summary: {processed.execution_summary}[/dim]\n")

        results = processed.results
        match results:
            case CrawlResult():
                self._crawl(results.items)
            case SummarizeResult():
                self._summaries(results.items)
            case TakeawaysResult():
                self._takeaways(results.items)
            case KnowledgeBaseResult():
                self._knowledge_base(results)
            case QueryResult():
                self._query(results)
            case FullAnalysisResult():
                self._full_analysis(results)
            case _:
                assert_never(results)

    def _heading(self, index: int, item: ContentRecord) -> None:
        self.console.print(f"\n[cyan]{index}. {item.title}[/cyan]")
        self.console.print(f"[dim]   URL: {item.url}[/dim]")

    def _crawl(self, items: List[ContentRecord]) -> None:
        self.console.print("[bold yellow]Crawled Content:[/bold yellow]")
        for index, item in enumerate(items, start=1):
            self._heading(index, item)
            self.console.print(f"[dim]   Word count: {item.word_count}[/dim]")
            self.console.print(f"[dim]   Crawled: {item.fetched_at:%Y-%m-%d %H:%M:%S}[/dim]")
            if self.verbose:
                self.console.print(f"[dim]   Content preview: {item.body[:200]}...[/dim]")

    def _summaries(self, items: List[ContentRecord]) -> None:
        self.console.print("[bold yellow]Content Summaries:[/bold yellow]")
        for index, item in enumerate(items, start=1):
            self._heading(index, item)
            if item.summary:
                self.console.print(f"   Summary: {item.summary}")
            else:
                self.console.print("[red]   Summary: Failed to generate[/red]")

    def _takeaways(self, items: List[ContentRecord]) -> None:
        self.console.print("[bold yellow]Key Takeaways:[/bold yellow]")
        for index, item in enumerate(items, start=1):
            self._heading(index, item)
            if item.takeaways:
                self.console.print("   Key Takeaways:")
                for number, takeaway in enumerate(item.takeaways, start=1):
                    self.console.print(f"     {number}. {takeaway}")
            else:
                self.console.print("[red]   Key Takeaways: Failed to extract[/red]")

    def _knowledge_base(self, results: KnowledgeBaseResult) -> None:
        self.console.print("[bold yellow]Knowledge Base:[/bold yellow]")
        self.console.print(f"[green]Stored {results.metadata.documents_stored} document(s)[/green]")
        self.console.print(f"[green]Created {results.metadata.chunks_created} searchable chunk(s)[/green]")
        self.console.print("[dim]Content is now available for Q&A queries.[/dim]")

    def _query(self, results: QueryResult) -> None:
        self.console.print("[bold yellow]Query Results:[/bold yellow]")
        self.console.print(f"\nAnswer: {results.answer.answer}\n")
        if results.answer.sources:
            self.console.print("[blue]Sources:[/blue]")
            for index, source in enumerate(results.answer.sources, start=1):
                self.console.print(f"[dim]  {index}. {source.title} - {source.url}[/dim]")

    def _full_analysis(self, results: FullAnalysisResult) -> None:
        self.console.print("[bold yellow]Full Analysis Results:[/bold yellow]")
        self.console.print(f"[green]Crawled {len(results.crawled_content)} page(s)[/green]")
        steps = [
            (results.summary_generated, "Generated summaries", "Summaries could not be generated"),
            (results.takeaways_extracted, "Extracted key takeaways", "Key takeaways could not be extracted"),
            (results.stored_in_knowledge_base, "Stored in knowledge base", "Knowledge base storage failed"),
        ]
        for done, ok_text, failed_text in steps:
            self.console.print(f"[green]{ok_text}[/green]" if done else f"[red]{failed_text}[/red]")

        self.console.print(f"\n[blue]Total chunks created: {results.metadata.chunks_created}[/blue]")
        if results.stored_in_knowledge_base:
            self.console.print("[dim]All content is now available for Q&A queries.[/dim]")

        if self.verbose and results.crawled_content:
            sample = results.crawled_content[0]
            self.console.print("\n[bold yellow]Sample Analysis:[/bold yellow]")
            self.console.print(f"[cyan]Title: {sample.title}[/cyan]")
            if sample.summary:
                self.console.print(f"Summary: {sample.summary}")
            if sample.takeaways:
                self.console.print("Key Takeaways:")
                for number, takeaway in enumerate(sample.takeaways, start=1):
                    self.console.print(f"  {number}. {takeaway}")
