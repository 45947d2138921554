"""
Console view of the check-in history.

Runs one reconciliation cycle against the configured backend and prints
the published list. Run with: uv run history-sync
"""

import asyncio
from datetime import UTC

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from history_sync.config import AppConfig, get_config
from history_sync.observability import configure_logging
from history_sync.services.reconciler import HistoryReconciler, HistoryState, ReconcilePhase
from history_sync.services.session import TokenSession
from history_sync.services.submissions_client import open_source

console = Console()

_STATUS_STYLES = {
    "completed": "green",
    "pending": "yellow",
    "in_progress": "blue",
    "failed": "red",
}


def build_history_table(state: HistoryState) -> Table:
    """Render a published history state as a rich table."""
    title = f"Check-in history ({state.filter.value}, {state.sort.value})"
    if state.used_fallback:
        title += " (offline data)"

    table = Table(title=title)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("Submitted", style="white")
    table.add_column("Status")
    table.add_column("Answers", justify="right")
    table.add_column("Reviewed")

    for item in state.items:
        record = item.record
        status_style = _STATUS_STYLES.get(record.status.value, "white")
        table.add_row(
            str(item.id),
            record.category.display_name,
            record.submitted_at.astimezone(UTC).strftime("%Y-%m-%d %H:%M UTC"),
            f"[{status_style}]{record.status.value}[/{status_style}]",
            str(len(record.responses)),
            "yes" if record.is_reviewed else "no",
        )
    return table


async def show_history(config: AppConfig) -> HistoryState:
    session = TokenSession(config.api.auth_token)
    if session.is_logged_in and not session.is_token_valid():
        console.print("⚠️  Auth token looks expired; the backend may reject the request", style="yellow")

    async with open_source(config.api, session=session) as source:
        reconciler = HistoryReconciler(source, config.history, aggregate=config.api.aggregate)
        state = await reconciler.refresh()

    if state.phase is ReconcilePhase.FAILED:
        console.print(Panel(state.error_message or "Unable to load history", style="red"))
    elif not state.items:
        console.print("No check-ins yet", style="yellow")

    console.print(build_history_table(state))
    return state


def run() -> None:
    config = get_config()
    configure_logging(config.logging)
    asyncio.run(show_history(config))


if __name__ == "__main__":
    run()
