"""
Report building, printing and export utilities.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO

import pandas as pd

from .interfaces import RegistryClient
from .models import MODULE, DependencyDeclaration, ReportEntry, ScanResult
from .resolvers import RegistryError
from .versions import compare_versions


logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["kind", "source", "current", "latest", "status", "error"]


def entry_status(current: str, latest: Optional[str]) -> str:
    if latest is None:
        return "not-found"
    if not current:
        return "unknown"
    order = compare_versions(current, latest)
    if order is None:
        return "unknown"
    return "outdated" if order < 0 else "up-to-date"


def _resolve_entry(
    declaration: DependencyDeclaration, resolve: Callable[[str], Optional[str]]
) -> ReportEntry:
    try:
        latest = resolve(declaration.source)
    except RegistryError as e:
        logger.debug("Lookup failed for %s %s: %s", declaration.kind, declaration.source, e)
        return ReportEntry(
            kind=declaration.kind,
            source=declaration.source,
            current=declaration.version,
            error=str(e),
            status="error",
        )
    return ReportEntry(
        kind=declaration.kind,
        source=declaration.source,
        current=declaration.version,
        latest=latest,
        status=entry_status(declaration.version, latest),
    )


def build_report(scan: ScanResult, client: RegistryClient) -> List[ReportEntry]:
    """Look up every collected source, modules first, each group sorted by source.

    A failed lookup is recorded on its entry and does not stop the others.
    """
    entries = []
    for source in sorted(scan.modules):
        entries.append(
            _resolve_entry(scan.modules[source], client.resolve_latest_module_version)
        )
    for source in sorted(scan.providers):
        entries.append(
            _resolve_entry(scan.providers[source], client.resolve_latest_provider_version)
        )
    return entries


def print_report(entries: Iterable[ReportEntry], stream: Optional[TextIO] = None) -> None:
    out = stream if stream is not None else sys.stdout
    for entry in entries:
        label = "Module" if entry.kind == MODULE else "Provider"
        if entry.error is not None:
            target = entry.source if entry.kind == MODULE else f"provider {entry.source}"
            print(f"Error fetching latest version for {target}: {entry.error}", file=out)
            continue

        print(f"{label} source: {entry.source}", file=out)
        print(f"Current version: {entry.current}", file=out)
        if entry.latest is None:
            print("Latest version: Not found", file=out)
        else:
            print(f"Latest version: {entry.latest}", file=out)
        print("", file=out)


def report_frame(entries: Iterable[ReportEntry]) -> pd.DataFrame:
    return pd.DataFrame([entry.to_dict() for entry in entries], columns=REPORT_COLUMNS)


def export_report_csv(entries: Iterable[ReportEntry], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report_frame(entries).to_csv(path, index=False)
    return path


def save_report_json(entries: Iterable[ReportEntry], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump([entry.to_dict() for entry in entries], f, indent=2)
    return path
