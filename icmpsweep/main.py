"""Command line entry point for icmpsweep."""

from __future__ import annotations

from pathlib import Path

import typer

from ._config import Settings
from ._dispatcher import Dispatcher
from ._exceptions import RawSocketPermissionError
from ._hosts import read_hosts
from ._log import console, logger, setup_logging
from ._models import HostReport
from ._probe import ProbeRunner
from ._report import run_footer, summary_table

app = typer.Typer(help="icmpsweep - ICMP echo probes across a host list")


def _print_host(report: HostReport) -> None:
    console.print(str(report), markup=False, highlight=False, soft_wrap=True)


@app.command()
def sweep(
    file: Path = typer.Option(Path("hosts.csv"), "--file", "-f", help="Host list file (first field is the host)"),
    count: int = typer.Option(10, "--count", "-c", help="Echo requests sent to each host"),
    routines: int = typer.Option(10, "--routines", "-r", help="Hosts probed simultaneously"),
    timeout: float = typer.Option(3.0, "--timeout", "-t", help="Seconds to wait for each reply"),
    interval: float = typer.Option(1.0, "--interval", "-i", help="Target spacing between echoes in seconds"),
    delimiter: str = typer.Option(",", "--delimiter", help="Field delimiter of the host list"),
    table: bool = typer.Option(False, "--table/--no-table", help="Print a summary table at the end"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every probe"),
):
    """Probe every host in FILE and print loss and round trip statistics."""
    setup_logging(verbose)

    settings = Settings(
        hosts_file=file,
        delimiter=delimiter,
        packet_count=count,
        concurrency=routines,
        timeout=timeout,
        interval=interval,
    )
    try:
        settings.validate()
    except ValueError as exc:
        logger.error("Invalid options: %s", exc)
        raise typer.Exit(code=2)

    try:
        hosts = read_hosts(
            settings.hosts_file,
            delimiter=settings.delimiter,
            comment=settings.comment,
        )
    except OSError as exc:
        logger.error("Cannot read host list %s: %s", settings.hosts_file, exc)
        raise typer.Exit(code=2)

    runner = ProbeRunner(
        timeout=settings.timeout,
        interval=settings.interval,
        payload=settings.payload,
    )
    dispatcher = Dispatcher(runner, settings.concurrency, on_complete=_print_host)
    try:
        run = dispatcher.run_all(hosts, settings.packet_count)
    except RawSocketPermissionError:
        raise typer.Exit(code=1)

    if table:
        console.print(summary_table(run))
    console.print(run_footer(run), highlight=False)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
