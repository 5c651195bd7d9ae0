"""
Core data models for the scan and the report.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional


logger = logging.getLogger(__name__)

MODULE = "module"
PROVIDER = "provider"


@dataclass(frozen=True)
class DependencyDeclaration:
    """A module or provider source with the version pinned in configuration."""

    kind: str
    source: str
    version: str = ""
    file_path: Optional[str] = None
    line: Optional[int] = None

    @property
    def location(self) -> str:
        if self.file_path is None:
            return "<text>"
        if self.line is None:
            return self.file_path
        return f"{self.file_path}:{self.line}"


@dataclass
class ScanResult:
    """Declarations collected from a tree, keyed by source (last write wins)."""

    modules: Dict[str, DependencyDeclaration] = field(default_factory=dict)
    providers: Dict[str, DependencyDeclaration] = field(default_factory=dict)

    def add(self, declaration: DependencyDeclaration) -> None:
        if declaration.kind == MODULE:
            target = self.modules
        elif declaration.kind == PROVIDER:
            target = self.providers
        else:
            raise ValueError(f"Unknown declaration kind: {declaration.kind}")

        previous = target.get(declaration.source)
        if previous is not None:
            logger.debug(
                "%s %s at %s overrides %s (version %r -> %r)",
                declaration.kind,
                declaration.source,
                declaration.location,
                previous.location,
                previous.version,
                declaration.version,
            )
        target[declaration.source] = declaration

    def module_versions(self) -> Dict[str, str]:
        return {source: decl.version for source, decl in self.modules.items()}

    def provider_versions(self) -> Dict[str, str]:
        return {source: decl.version for source, decl in self.providers.items()}

    def __len__(self) -> int:
        return len(self.modules) + len(self.providers)


@dataclass(frozen=True)
class ReportEntry:
    """Current-vs-latest comparison for one dependency source."""

    kind: str
    source: str
    current: str
    latest: Optional[str] = None
    error: Optional[str] = None
    status: str = "unknown"

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)
