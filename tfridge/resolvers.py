"""
Terraform registry client for module and provider versions.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests

from .interfaces import RegistryClient
from .versions import is_valid_semver, latest_version


logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.terraform.io/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_PROVIDER_NAMESPACE = "hashicorp"


class RegistryError(Exception):
    """A lookup against the registry failed for a single dependency."""


class RegistryStatusError(RegistryError):
    """The registry answered with a non-200 status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistryResponseError(RegistryError):
    """The registry answered with a body we cannot use."""


class ProviderFormatError(RegistryError):
    """A provider identifier is not ``name`` or ``namespace/name``."""


def module_lookup_id(source: str) -> str:
    """Drop a ``//subdir`` suffix; the submodule path plays no part in lookups."""
    return source.split("//", 1)[0]


def normalize_provider_source(source: str) -> str:
    """Return ``namespace/name`` for a provider, defaulting to hashicorp."""
    parts = source.split("/")
    if len(parts) == 2:
        return source
    if len(parts) == 1:
        return f"{DEFAULT_PROVIDER_NAMESPACE}/{source}"
    raise ProviderFormatError(f"provider format is incorrect: {source}")


class TerraformRegistryClient(RegistryClient):
    """Client for the public Terraform registry API."""

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def resolve_latest_module_version(self, source: str) -> Optional[str]:
        module = module_lookup_id(source)
        url = f"{self.base_url}/modules/{module}"
        logger.info("Fetching versions for module %s", module)
        versions = self._fetch_versions(url, "failed to fetch latest version")
        return self._select_latest(module, versions)

    def resolve_latest_provider_version(self, source: str) -> Optional[str]:
        provider = normalize_provider_source(source)
        url = f"{self.base_url}/providers/{provider}"
        logger.info("Fetching versions for provider %s", provider)
        versions = self._fetch_versions(
            url, "failed to fetch latest version for provider"
        )
        return self._select_latest(provider, versions)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "TerraformRegistryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch_versions(self, url: str, failure: str) -> List[str]:
        try:
            with self.session.get(url, timeout=self.timeout) as response:
                if response.status_code != 200:
                    raise RegistryStatusError(
                        f"{failure}, status code: {response.status_code}",
                        status_code=response.status_code,
                    )
                data = response.json()
        except requests.exceptions.JSONDecodeError as e:
            raise RegistryResponseError(f"invalid JSON from {url}: {e}") from e
        except requests.RequestException as e:
            raise RegistryError(f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise RegistryResponseError(f"invalid JSON from {url}: {e}") from e

        return self._parse_versions(data, url)

    @staticmethod
    def _parse_versions(data: Dict, url: str) -> List[str]:
        if not isinstance(data, dict):
            raise RegistryResponseError(f"unexpected response from {url}: not an object")
        versions = data.get("versions", [])
        if versions is None:
            return []
        if not isinstance(versions, list) or not all(
            isinstance(v, str) for v in versions
        ):
            raise RegistryResponseError(
                f"unexpected response from {url}: 'versions' is not a list of strings"
            )
        return versions

    @staticmethod
    def _select_latest(name: str, versions: List[str]) -> Optional[str]:
        if not versions:
            logger.debug("Registry lists no versions for %s", name)
            return None

        invalid = [v for v in versions if not is_valid_semver(v)]
        if invalid:
            logger.debug("Ignoring non-semver versions for %s: %s", name, invalid)

        latest = latest_version(versions)
        if latest is None:
            logger.debug("No valid semantic versions for %s", name)
        return latest
