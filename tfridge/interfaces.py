"""
Interfaces for registry lookups.
"""

from __future__ import annotations

from typing import Optional, Protocol


class RegistryClient(Protocol):
    """Resolve the latest published version of modules and providers."""

    def resolve_latest_module_version(self, source: str) -> Optional[str]:
        ...

    def resolve_latest_provider_version(self, source: str) -> Optional[str]:
        ...
