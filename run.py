#!/usr/bin/env python3
"""
Social Insights - Main CLI Entry Point

Turn free-text AI answers about social media performance into structured insights.

Usage:
    python run.py extract answer.md               # Parse a saved AI answer
    cat answer.md | python run.py extract -       # Parse from stdin
    python run.py extract answer.md -f json       # Print the record as JSON
    python run.py ask "When should I post?"       # Ask the workflow, then parse
    python run.py ask --mock                      # Use the canned offline answer
    python run.py dashboard -d posts.csv          # Show data aggregates
    python run.py serve                           # Start the web API
"""

import asyncio
import json
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from social_insights.config import get_settings, setup_logging
from social_insights.exceptions import InsightsError
from social_insights.extractors import InsightExtractor, load_vocabulary
from social_insights.loaders import FileLoader, LangflowClient, MockLangflowClient
from social_insights.models import InsightRecord, PostCollection
from social_insights.outputs import MarkdownReport, create_app
from social_insights.outputs.web_api import run_server

# Initialize CLI
app = typer.Typer(
    name="social-insights",
    help="Parse AI-generated insights about social media performance data",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

OUTPUT_FORMATS = ("table", "json", "markdown")


def print_banner():
    """Print application banner."""
    banner = """
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║   📊  SOCIAL INSIGHTS                                        ║
║   ─────────────────────────────────────────────────────────  ║
║   Turn AI answers into structured performance insights       ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
    """
    console.print(banner, style="bold cyan")


def print_record(record: InsightRecord, title: str = "Extracted Insights"):
    """Print an InsightRecord as rich tables."""
    metrics = record.metrics
    table = Table(title=f"📈 {title}", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Current", justify="right", style="green")
    table.add_column("Expected", justify="right", style="magenta")

    table.add_row("Engagement Rate", metrics.engagement_rate, "—")
    for name in ("likes", "shares", "comments", "views"):
        table.add_row(
            name.capitalize(),
            getattr(metrics, name),
            getattr(record.predictions, name),
        )
    table.add_row("─" * 15, "─" * 8, "─" * 8)
    table.add_row("Age Groups", ", ".join(metrics.age_groups) or "—", "")
    table.add_row("Gender Split", metrics.gender_split or "—", "")
    console.print(table)

    if record.format_insights:
        console.print("\n[bold]📊 Format Performance:[/bold]")
        for insight in record.format_insights:
            console.print(f"   • {insight}")

    recs = record.recommendations
    rec_table = Table(title="📚 Recommendations", show_header=False)
    rec_table.add_column("Field", style="cyan")
    rec_table.add_column("Value")
    rec_table.add_row("Best Time to Post", recs.timing or "—")
    rec_table.add_row("Hashtags", " ".join(recs.hashtags) or "—")
    rec_table.add_row("Content Tips", recs.content_tips or "—")
    rec_table.add_row("Audience", recs.audience or "—")
    console.print(rec_table)

    if record.analysis:
        console.print(Panel(record.analysis, title="Analysis", border_style="blue"))

    if record.is_empty:
        console.print("[yellow]⚠️  Nothing recognizable in this answer; all fields are defaults[/yellow]")


def output_record(record: InsightRecord, output_format: str, output: Optional[str] = None):
    """Print or save a record in the chosen format."""
    output_format = output_format.lower()
    if output_format not in OUTPUT_FORMATS:
        console.print(f"[red]✗[/red] Unknown format '{output_format}'. Use: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)

    if output_format == "json":
        text = json.dumps(record.to_display_dict(), indent=2)
        if output:
            with open(output, "w", encoding="utf-8") as f:
                f.write(text + "\n")
            console.print(f"[green]✓[/green] Saved to: {output}")
        else:
            # Plain print keeps the JSON pipeable
            print(text)
    elif output_format == "markdown":
        report = MarkdownReport(record)
        if output:
            path = report.save(output)
            console.print(f"[green]✓[/green] Saved to: {path}")
        else:
            console.print(report.content)
    else:
        print_record(record)


def build_extractor(vocabulary: Optional[str]) -> InsightExtractor:
    """Extractor from an explicit vocabulary file, else from settings."""
    if vocabulary:
        return InsightExtractor(vocabulary=load_vocabulary(vocabulary))
    return InsightExtractor.from_settings(get_settings())


def load_collection(data_file: Optional[str]) -> Optional[PostCollection]:
    """Load posts, returning None when the file is missing."""
    settings = get_settings()
    path = data_file or settings.data_file
    try:
        collection = FileLoader().load_posts(path)
    except InsightsError as e:
        console.print(f"[yellow]⚠️  No post data loaded: {e}[/yellow]")
        return None
    console.print(f"[green]✓[/green] Loaded {collection.total_posts} posts from {path}")
    return collection


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL or INFO)"
    ),
):
    """
    Parse free-text AI answers about social media data into structured insights.
    """
    setup_logging(log_level or get_settings().log_level)


@app.command()
def extract(
    source: str = typer.Argument(
        "-",
        help="File containing the AI answer, or '-' for stdin"
    ),
    output_format: str = typer.Option(
        "table",
        "--format", "-f",
        help="Output format: table, json, or markdown"
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output", "-o",
        help="Write json/markdown output to this file"
    ),
    vocabulary: Optional[str] = typer.Option(
        None,
        "--vocabulary",
        help="JSON file overriding heading and label synonyms"
    ),
    trace: bool = typer.Option(
        False,
        "--trace",
        help="Show which strategy filled each field"
    ),
):
    """Parse a saved AI answer into an insight record."""
    try:
        extractor = build_extractor(vocabulary)
        text = sys.stdin.read() if source == "-" else FileLoader().load_response(source)
    except InsightsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    record, extraction = extractor.extract_with_trace(text)
    output_record(record, output_format, output)

    if trace:
        table = Table(title="🔍 Extraction Trace", show_header=True)
        table.add_column("Field", style="cyan")
        table.add_column("Strategy", style="yellow")
        for field_name, strategy in extraction.strategies.items():
            table.add_row(field_name, strategy)
        console.print(f"Sections: {', '.join(extraction.sections) or 'none'}"
                      + (" (no headings, read as metrics)" if extraction.headless else ""))
        console.print(table)


@app.command()
def ask(
    question: Optional[str] = typer.Argument(
        None,
        help="Question about the data (omit for a full overview)"
    ),
    data_file: Optional[str] = typer.Option(
        None,
        "--data", "-d",
        help="CSV or JSON file with post data"
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Use a canned answer instead of calling Langflow"
    ),
    output_format: str = typer.Option(
        "table",
        "--format", "-f",
        help="Output format: table, json, or markdown"
    ),
    show_raw: bool = typer.Option(
        False,
        "--raw",
        help="Also print the raw answer"
    ),
):
    """Ask the analysis workflow about the data and parse its answer."""
    print_banner()
    settings = get_settings()

    if mock:
        client = MockLangflowClient()
    else:
        if not settings.langflow_access_token:
            console.print("[red]✗[/red] LANGFLOW_ACCESS_TOKEN not set!")
            console.print("   Copy .env.example to .env and add your token, or use --mock")
            raise typer.Exit(1)
        try:
            client = LangflowClient.from_settings(settings)
        except ValueError as e:
            console.print(f"[red]✗[/red] {e}")
            raise typer.Exit(1)

    collection = load_collection(data_file)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Asking the analysis workflow...", total=None)
        response = asyncio.run(client.ask(question, collection))
        progress.update(task, description="Answer received!")

    if response == settings.error_sentinel:
        console.print(f"[yellow]⚠️  {response}[/yellow]")

    if show_raw:
        console.print(Panel(response, title="Raw answer", border_style="dim"))

    try:
        extractor = InsightExtractor.from_settings(settings)
    except InsightsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    output_record(extractor.extract(response), output_format)


@app.command()
def dashboard(
    data_file: Optional[str] = typer.Option(
        None,
        "--data", "-d",
        help="CSV or JSON file with post data"
    ),
):
    """Show aggregates over the post data."""
    print_banner()
    collection = load_collection(data_file)
    if collection is None or collection.total_posts == 0:
        raise typer.Exit(1)

    table = Table(title="📊 Post Performance", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Average", justify="right", style="yellow")
    averages = collection.averages
    for name, total in collection.totals.items():
        table.add_row(name.capitalize(), f"{total:,}", f"{averages[name]:,.2f}")
    table.add_row("Engagement Rate", "—", f"{collection.average_engagement:.2f}%")
    console.print(table)

    for title, values, suffix in (
        ("🎞  Engagement by Post Type", collection.engagement_by_type, "%"),
        ("📅 Engagement by Day", collection.engagement_by_day, "%"),
        ("👥 Posts by Age Group", collection.age_group_distribution, ""),
    ):
        breakdown = Table(title=title, show_header=False)
        breakdown.add_column("Key", style="cyan")
        breakdown.add_column("Value", justify="right")
        for key, value in values.items():
            breakdown.add_row(key, f"{value}{suffix}")
        console.print(breakdown)


@app.command()
def serve(
    data_file: Optional[str] = typer.Option(
        None,
        "--data", "-d",
        help="CSV or JSON file with post data"
    ),
    mock: bool = typer.Option(
        False,
        "--mock",
        help="Answer questions with a canned reply instead of Langflow"
    ),
):
    """Start the web API."""
    print_banner()
    settings = get_settings()

    client = None
    if mock:
        client = MockLangflowClient()
    elif settings.langflow_flow_id:
        client = LangflowClient.from_settings(settings)
    else:
        console.print("[yellow]⚠️  LANGFLOW_FLOW_ID not set; /api/insights is disabled[/yellow]")

    try:
        extractor = InsightExtractor.from_settings(settings)
    except InsightsError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    api = create_app(client=client, extractor=extractor, collection=load_collection(data_file))

    console.print("\n[green]✓[/green] Starting web API...")
    console.print(f"   URL: http://{settings.web_host}:{settings.web_port}")
    console.print("\n   Press Ctrl+C to stop\n")

    run_server(api, host=settings.web_host, port=settings.web_port)


if __name__ == "__main__":
    app()
