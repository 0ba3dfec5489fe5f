from __future__ import annotations

from urllib.parse import quote

from rt.core.result import Err, Ok, Result
from rt.core.structured import as_str_dict
from rt.platform.http import HttpClient
from rt.services.release.errors import ReleaseError
from rt.services.release.model import NpmPackageInfo

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


def _str_map(obj: object) -> dict[str, str]:
    data = as_str_dict(obj) or {}
    return {k: v for k, v in data.items() if isinstance(v, str)}


class NpmRegistry:
    """Read-only view of the representative package on the registry.

    The package document is fetched at most once per instance; one instance
    lives for one release run.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        package_name: str,
        registry_url: str = DEFAULT_REGISTRY_URL,
    ) -> None:
        self._http = http
        self.package_name = package_name
        self._registry_url = registry_url.rstrip("/")
        self._cached: NpmPackageInfo | None = None

    def package_info(self) -> Result[NpmPackageInfo, ReleaseError]:
        if self._cached is not None:
            return Ok(self._cached)

        url = f"{self._registry_url}/{quote(self.package_name, safe='@')}"
        result = self._http.get_json(url)
        if isinstance(result, Err):
            if result.error.not_found:
                message = f"{self.package_name} has never been published to the registry"
            else:
                message = f"failed to fetch registry info for {self.package_name}"
            return Err(
                ReleaseError(kind="registry_failed", message=message, hint=str(result.error))
            )

        doc = result.value
        versions = as_str_dict(doc.get("versions")) or {}
        self._cached = NpmPackageInfo(
            dist_tags=_str_map(doc.get("dist-tags")),
            versions=frozenset(versions.keys()),
            time=_str_map(doc.get("time")),
        )
        return Ok(self._cached)
