"""Host list loading."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Union

from ._log import logger


def parse_hosts(
    lines: Iterable[str], *, delimiter: str = ",", comment: str = "#"
) -> list[str]:
    """Return the first field of every non-blank, non-comment record."""
    hosts: list[str] = []
    for row in csv.reader(lines, delimiter=delimiter):
        if not row:
            continue
        first = row[0].strip()
        if not first or (comment and first.startswith(comment)):
            continue
        hosts.append(first)
    return hosts


def read_hosts(
    path: Union[str, Path], *, delimiter: str = ",", comment: str = "#"
) -> list[str]:
    with open(path, newline="", encoding="utf-8") as handle:
        hosts = parse_hosts(handle, delimiter=delimiter, comment=comment)
    logger.debug("Loaded %d hosts from %s", len(hosts), path)
    return hosts
