"""
CLI интерфейс для Content Audit.

Использует Rich для вывода. Аудит выполняется локально по JSON файлу со
статьями; команда stats обращается к запущенному backend.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List, Optional

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from content_audit import __version__
from content_audit.config import EngineConfig, load_rule_overrides
from content_audit.core.errors import ContentAuditError, RuleNotFoundError
from content_audit.core.models import Severity
from content_audit.engine import RulesEngine
from content_audit.registry import RuleRegistry, create_default_registry
from content_audit.reports import ReportGenerator
from content_audit.store import load_articles

load_dotenv()

app = typer.Typer(
    name="content-audit",
    help="Content Audit CLI: аудит статей базы знаний",
)
console = Console()

BACKEND_URL = os.getenv("CONTENT_AUDIT_BACKEND_URL", "http://localhost:8000")

SEVERITY_STYLE = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
    "info": "blue",
}


def build_registry(overrides: Optional[Path]) -> RuleRegistry:
    registry = create_default_registry()
    if overrides:
        registry.apply_overrides(load_rule_overrides(overrides))
    return registry


def parse_severity(value: Optional[str]) -> Optional[Severity]:
    if value is None:
        return None
    try:
        return Severity.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Подробные логи")):
    """Content Audit CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


@app.command()
def rules(
    tag: Optional[str] = typer.Option(None, help="Только правила с этим тегом"),
    overrides: Optional[Path] = typer.Option(None, help="JSON файл с настройками правил"),
):
    """📋 Список правил."""
    registry = build_registry(overrides)

    table = Table(title="📋 Правила аудита")
    table.add_column("ID", style="cyan")
    table.add_column("Название")
    table.add_column("Категория", style="magenta")
    table.add_column("Серьёзность")
    table.add_column("Включено")

    for metadata in registry.list_metadata(tag=tag):
        severity = metadata.severity.value
        table.add_row(
            metadata.id,
            metadata.name,
            metadata.category.value,
            f"[{SEVERITY_STYLE[severity]}]{severity}[/]",
            "✅" if metadata.enabled else "❌",
        )

    console.print(table)


@app.command("show-rule")
def show_rule(
    rule_id: str,
    overrides: Optional[Path] = typer.Option(None, help="JSON файл с настройками правил"),
):
    """🔎 Описание и конфигурация правила."""
    registry = build_registry(overrides)
    try:
        metadata = registry.get_rule(rule_id).get_metadata()
    except RuleNotFoundError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]{metadata.name}[/] [dim]v{metadata.version}[/]\n"
        f"{metadata.description}\n\n"
        f"Категория: {metadata.category.value} | "
        f"Серьёзность: {metadata.severity.value} | "
        f"Настраиваемое: {'да' if metadata.configurable else 'нет'}",
        title=metadata.id,
    ))
    console.print_json(json.dumps(metadata.config, ensure_ascii=False))


@app.command()
def audit(
    articles_file: Path = typer.Argument(..., help="JSON файл со статьями"),
    rule: Optional[List[str]] = typer.Option(None, "--rule", "-r", help="Запустить только эти правила"),
    min_severity: Optional[str] = typer.Option(None, help="Минимальная серьёзность проблем"),
    overrides: Optional[Path] = typer.Option(None, help="JSON файл с настройками правил"),
    as_json: bool = typer.Option(False, "--json", help="Вывести результат в JSON"),
    report: Optional[str] = typer.Option(None, help="Сохранить отчёт: markdown или json"),
    output_dir: Path = typer.Option(Path("audit_reports"), help="Директория для отчётов"),
):
    """🔍 Аудит статей из JSON файла."""
    severity = parse_severity(min_severity)
    if report is not None and report not in ("markdown", "json"):
        raise typer.BadParameter("report must be 'markdown' or 'json'")

    try:
        articles = load_articles(articles_file)
        registry = build_registry(overrides)
    except (OSError, ValueError, ContentAuditError) as e:
        console.print(f"[red]❌ Не удалось загрузить данные: {e}[/]")
        raise typer.Exit(1)

    engine = RulesEngine(registry, EngineConfig())
    batch = asyncio.run(engine.audit_articles(articles, rule_ids=rule or None, min_severity=severity))

    if as_json:
        typer.echo(json.dumps(batch.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_batch(batch)

    if report:
        path = ReportGenerator(output_dir).generate(batch, format=report)
        console.print(f"[dim]📄 Отчёт сохранён: {path}[/]")

    if batch.failures:
        raise typer.Exit(1)


def print_batch(batch) -> None:
    table = Table(title="🔍 Результаты аудита")
    table.add_column("Статья", style="cyan")
    table.add_column("Здоровье", justify="right")
    table.add_column("Проблемы", justify="right")
    table.add_column("Главная проблема")

    for result in batch.results:
        top = max(result.issues, key=lambda issue: issue.severity.rank, default=None)
        if top is None:
            headline = "[green]-[/]"
        else:
            style = SEVERITY_STYLE[top.severity.value]
            headline = f"[{style}]{top.issue}[/] [dim]({top.rule_id})[/]"
        score = result.content_health_score
        score_style = "green" if score >= 80 else "yellow" if score >= 60 else "red"
        table.add_row(
            result.article_title or result.article_id,
            f"[{score_style}]{score}[/]",
            str(result.issues_found),
            headline,
        )

    console.print(table)

    summary = batch.summary
    breakdown = ", ".join(
        f"[{SEVERITY_STYLE[name]}]{name}: {count}[/]"
        for name, count in summary.severity_breakdown.items()
    )
    console.print(Panel(
        f"Статей: {summary.total_articles} | "
        f"С проблемами: {summary.articles_with_issues} | "
        f"Проблем: {summary.total_issues} | "
        f"В среднем: {summary.average_issues_per_article:.2f}\n{breakdown}",
        title="📊 Сводка",
    ))

    for failure in batch.failures:
        console.print(f"[red]❌ {failure.article_id}: {failure.reason}[/]")


@app.command()
def stats(url: str = typer.Option(BACKEND_URL, help="Адрес backend")):
    """📊 Статистика правил с запущенного backend."""
    try:
        response = httpx.get(f"{url}/api/audit/stats", timeout=30.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]❌ Backend недоступен: {e}[/]")
        raise typer.Exit(1)

    data = response.json()
    table = Table(title="📊 Статистика правил")
    table.add_column("Показатель", style="cyan")
    table.add_column("Значение", style="green")

    table.add_row("Всего правил", str(data["total_rules"]))
    table.add_row("Включено", str(data["enabled_rules"]))
    table.add_row("Настраиваемых", str(data["configurable_rules"]))
    for category, count in data["rule_categories"].items():
        table.add_row(f"  {category}", str(count))

    sample = data.get("sample_audit", {})
    table.add_row("Статей в выборке", str(sample.get("articles_audited", 0)))
    table.add_row("Проблем в выборке", str(sample.get("total_issues", 0)))
    if sample.get("average_health_score") is not None:
        table.add_row("Среднее здоровье", f"{sample['average_health_score']:.1f}")

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """🚀 Запустить HTTP API."""
    import uvicorn
    uvicorn.run("backend.main:app", host=host, port=port, reload=reload)


@app.command()
def version():
    """Показать версию."""
    console.print(f"content-audit {__version__}")


if __name__ == "__main__":
    app()
