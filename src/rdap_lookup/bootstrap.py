"""
RDAP bootstrap registry.

Indexes the IANA RDAP bootstrap document (https://data.iana.org/rdap/dns.json)
into an immutable TLD -> base URL mapping and resolves domains against it.

Bootstrap format:
{
    "services": [
        [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
        [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
        ...
    ]
}
"""

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Protocol, runtime_checkable
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .config import IANA_BOOTSTRAP_URL
from .exceptions import BootstrapError, NetworkError, ProtocolError

# The fixed com/net endpoints expressed as a snapshot
VERISIGN_SNAPSHOT = {
    "services": [
        [["com"], ["https://rdap.verisign.com/com/v1/"]],
        [["net"], ["https://rdap.verisign.com/net/v1/"]],
    ]
}


@dataclass(frozen=True)
class BootstrapMatch:
    """Resolution of a domain to its RDAP server."""

    tld: str
    base_url: str


def extract_tld(domain: str) -> Optional[str]:
    """
    Extract the TLD (text after the final dot) from a domain.

    Returns:
        Lowercase TLD, or None if the domain has fewer than two labels
    """
    parts = domain.lower().split(".")
    if len(parts) < 2 or not parts[-1]:
        return None
    return parts[-1]


def select_base_url(candidates: list[str]) -> str:
    """Pick the first https candidate, else the first candidate in list order."""
    for url in candidates:
        if urlparse(url).scheme.lower() == "https":
            return url
    return candidates[0]


class BootstrapIndex:
    """
    Immutable TLD -> RDAP base URL index.

    Built once from a snapshot document and safe to share between any number
    of concurrent lookups. Rebuilding means constructing a new index.
    """

    __slots__ = ("_base_urls", "_candidates")

    def __init__(
        self,
        base_urls: Mapping[str, str],
        candidates: Optional[Mapping[str, tuple[str, ...]]] = None,
    ) -> None:
        self._base_urls = MappingProxyType(dict(base_urls))
        self._candidates = MappingProxyType(dict(candidates or {}))

    @classmethod
    def from_snapshot(
        cls,
        document: dict,
        logger: Optional[AuditLogger] = None,
    ) -> "BootstrapIndex":
        """
        Build an index from a bootstrap document.

        The https tie-break runs once per service entry and every TLD of that
        entry points at the same base URL. A TLD repeated in a later entry
        overwrites the earlier one.

        Raises:
            BootstrapError: If the document has no services list
        """
        services = document.get("services") if isinstance(document, dict) else None
        if not isinstance(services, list):
            raise BootstrapError(
                code="missing_services",
                message="Bootstrap document has no 'services' list",
                details={"document_type": type(document).__name__},
            )

        base_urls: dict[str, str] = {}
        candidates: dict[str, tuple[str, ...]] = {}

        for position, entry in enumerate(services):
            if (
                not isinstance(entry, list)
                or len(entry) < 2
                or not isinstance(entry[0], list)
                or not isinstance(entry[1], list)
            ):
                _warn_skipped(logger, position, "entry is not a [tlds, urls] pair")
                continue

            urls = [_with_trailing_slash(u) for u in entry[1] if isinstance(u, str) and u]
            if not urls:
                _warn_skipped(logger, position, "entry has no RDAP URLs")
                continue

            chosen = select_base_url(urls)
            for tld in entry[0]:
                if not isinstance(tld, str) or not tld.strip(".").strip():
                    continue
                key = tld.strip().strip(".").lower()
                if "." in key:
                    continue
                base_urls[key] = chosen
                candidates[key] = tuple(urls)

        return cls(base_urls, candidates)

    @classmethod
    def from_source(
        cls,
        source: "SnapshotSource",
        logger: Optional[AuditLogger] = None,
    ) -> "BootstrapIndex":
        return cls.from_snapshot(source.load(), logger=logger)

    def resolve(self, domain: str) -> Optional[BootstrapMatch]:
        """
        Resolve a domain to its RDAP base URL.

        Returns:
            BootstrapMatch, or None if the TLD is missing or not indexed
        """
        tld = extract_tld(domain)
        if tld is None:
            return None
        base_url = self._base_urls.get(tld)
        if base_url is None:
            return None
        return BootstrapMatch(tld=tld, base_url=base_url)

    def candidates(self, tld: str) -> tuple[str, ...]:
        """All base URLs listed for a TLD, in snapshot order."""
        return self._candidates.get(tld.lower(), ())

    @property
    def tlds(self) -> frozenset[str]:
        return frozenset(self._base_urls)

    def __contains__(self, tld: object) -> bool:
        return isinstance(tld, str) and tld.lower() in self._base_urls

    def __len__(self) -> int:
        return len(self._base_urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._base_urls)


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def _warn_skipped(logger: Optional[AuditLogger], position: int, reason: str) -> None:
    if logger:
        logger.warn(
            "BootstrapIndex",
            f"Skipping bootstrap service entry: {reason}",
            {"position": position},
        )


# ----------------------------------------------------------------------------
# Snapshot sources
# ----------------------------------------------------------------------------

@runtime_checkable
class SnapshotSource(Protocol):
    """Anything that can produce a bootstrap document."""

    def load(self) -> dict:
        ...


class StaticSnapshotSource:
    """Snapshot held in memory."""

    def __init__(self, document: dict) -> None:
        self._document = document

    def load(self) -> dict:
        return self._document


class FileSnapshotSource:
    """Snapshot stored as a JSON file, typically written by refresh_snapshot."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            raise BootstrapError(
                code="snapshot_not_found",
                message=f"Bootstrap snapshot not found: {self._path}",
                details={"path": str(self._path)},
            )
        except (OSError, json.JSONDecodeError) as e:
            raise BootstrapError(
                code="snapshot_unreadable",
                message=f"Could not read bootstrap snapshot: {e}",
                details={"path": str(self._path)},
            )


class HttpSnapshotSource:
    """Snapshot fetched from the IANA bootstrap service."""

    def __init__(
        self,
        url: str = IANA_BOOTSTRAP_URL,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport

    def load(self) -> dict:
        """
        Fetch the bootstrap document.

        Raises:
            NetworkError: On transport failure or non-200 status
            ProtocolError: If the body is not a JSON object
        """
        headers = {"Accept": "application/json"}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        try:
            with httpx.Client(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = client.get(self._url, headers=headers)
        except httpx.HTTPError as e:
            raise NetworkError(
                code="bootstrap_fetch_failed",
                message=f"Failed to fetch {self._url}: {e}",
                details={"url": self._url},
            )

        if response.status_code != 200:
            raise NetworkError(
                code="bootstrap_fetch_failed",
                message=f"Failed to fetch {self._url}: {response.status_code}",
                details={"url": self._url, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(
                code="bootstrap_not_json",
                message=f"Bootstrap response is not valid JSON: {e}",
                details={"url": self._url},
            )
        if not isinstance(data, dict):
            raise ProtocolError(
                code="bootstrap_not_object",
                message="Bootstrap response is not a JSON object",
                details={"url": self._url},
            )
        return data


def refresh_snapshot(
    source: SnapshotSource,
    destination: Path,
    logger: Optional[AuditLogger] = None,
) -> BootstrapIndex:
    """
    Fetch a snapshot, check that it indexes at least one TLD, and write it
    to ``destination`` atomically.

    Returns:
        The index built from the fetched document

    Raises:
        BootstrapError: If the document indexes nothing or cannot be written
    """
    document = source.load()
    index = BootstrapIndex.from_snapshot(document, logger=logger)
    if len(index) == 0:
        raise BootstrapError(
            code="empty_snapshot",
            message="Bootstrap document does not map any TLD",
        )

    destination = Path(destination)
    tmp_path = destination.with_name(destination.name + ".tmp")
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        tmp_path.replace(destination)
    except OSError as e:
        raise BootstrapError(
            code="snapshot_unwritable",
            message=f"Could not write bootstrap snapshot: {e}",
            details={"path": str(destination)},
        )

    if logger:
        logger.info(
            "BootstrapRefresh",
            f"Saved bootstrap snapshot with {len(index)} TLDs",
            {"path": str(destination)},
        )
    return index
