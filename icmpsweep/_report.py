"""Human-readable summaries of a run."""

from __future__ import annotations

from typing import Optional

from rich.table import Table

from ._models import RunReport


def _ms(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "-"


def summary_table(run: RunReport) -> Table:
    table = Table(title="icmpsweep summary")
    table.add_column("Id", justify="right")
    table.add_column("Host")
    table.add_column("Address")
    table.add_column("Sent", justify="right")
    table.add_column("Recv", justify="right")
    table.add_column("Loss%", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Max", justify="right")

    for report in run.hosts:
        stats = report.stats
        if report.failure is not None:
            loss = f"[red]{report.failure.value}[/red]"
        else:
            loss = f"{stats.loss_percent:.1f}"
        table.add_row(
            str(report.identifier),
            report.target,
            report.resolved or "?",
            str(stats.sent),
            str(stats.received),
            loss,
            _ms(stats.rtt_min),
            _ms(stats.rtt_avg),
            _ms(stats.rtt_max),
        )
    return table


def run_footer(run: RunReport) -> str:
    return (
        f"{len(run.hosts)} hosts, {run.sent} packets sent, {run.received} received "
        f"in {run.elapsed:.2f} s (peak {run.peak_concurrency} concurrent)"
    )
