"""Read-only JSON over HTTPS.

The release tool only ever reads package documents from a registry, so the
client surface is a single `get_json`. `MockHttpClient` serves canned
documents keyed by URL.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from rt import __version__
from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, as_str_dict

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

_JSON_ACCEPT = "application/json"


@dataclass(frozen=True, slots=True)
class HttpError:
    """A failed request. `status` is 0 when no HTTP response was received."""

    url: str
    status: int
    message: str

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        """Fetch `url` and return the body, which must be a JSON object."""
        ...


@dataclass(slots=True)
class RealHttpClient:
    """urllib client verifying TLS against the system trust store."""

    timeout: float = 30.0
    user_agent: str = f"rt/{__version__}"
    _ssl_context: ssl.SSLContext = field(default_factory=ssl.create_default_context, repr=False)

    def _fetch(self, url: str) -> Result[tuple[bytes, str], HttpError]:
        headers = {"User-Agent": self.user_agent, "Accept": _JSON_ACCEPT}
        request = urllib.request.Request(url, headers=headers)
        try:
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=self._ssl_context
            ) as response:
                charset = response.headers.get_content_charset() or "utf-8"
                return Ok((response.read(), charset))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message=f"no response after {self.timeout}s"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        fetched = self._fetch(url)
        if isinstance(fetched, Err):
            return fetched

        raw, charset = fetched.value
        try:
            decoded: object = json.loads(raw.decode(charset))
        except (LookupError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"invalid JSON body: {e}"))

        document = as_str_dict(decoded)
        if document is None:
            return Err(HttpError(url=url, status=0, message="JSON body is not an object"))
        return Ok(document)


class MockHttpClient:
    """Serves documents registered with `set_json`; unknown URLs answer 404."""

    def __init__(self) -> None:
        self._documents: dict[str, StrDict | HttpError] = {}
        self.calls: list[str] = []

    def set_json(self, url: str, response: StrDict | HttpError) -> None:
        self._documents[url] = response

    def get_json(self, url: str) -> Result[StrDict, HttpError]:
        self.calls.append(url)
        response = self._documents.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not Found"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
