"""Dev Hub client: package version metadata via the Tooling API query endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import urllib.parse
from typing import Any, Dict, List, Optional

import aiohttp

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url
from errors import ResolutionError, ServiceRequestError
from .client import DistributionServiceClient, PackageListing, PackageVersionReport

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[A-Za-z0-9]{15}(?:[A-Za-z0-9]{3})?$")
SUBSCRIBER_VERSION_PREFIX = "04t"
PACKAGE_VERSION_PREFIX = "05i"

VERSION_FIELDS = ("MajorVersion", "MinorVersion", "PatchVersion", "BuildNumber")


def _validate_id(value: str) -> str:
    """Reject anything that is not a 15/18 character record id before it reaches SOQL."""
    value = (value or "").strip()
    if not _ID_RE.match(value):
        raise ResolutionError(f"'{value}' is not a valid package version id", value)
    return value


def version_from_record(record: Dict[str, Any]) -> Optional[str]:
    """Build "Major.Minor.Patch.Build" from a Package2Version record."""
    parts = [record.get(name) for name in VERSION_FIELDS]
    if any(part is None for part in parts):
        return None
    return ".".join(str(part) for part in parts)


class DevHubClient(DistributionServiceClient):
    """Distribution service client backed by a Dev Hub org.

    The access token is obtained elsewhere (see cli_config); this client only
    attaches it to requests.
    """

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        api_version: str = Constants.API_VERSION,
        timeout: int = Constants.REQUEST_TIMEOUT,
        max_connections: int = Constants.MAX_CONCURRENCY,
    ):
        """Initialize the client.

        Args:
            instance_url: Org base URL, e.g. https://acme.my.salesforce.com.
            access_token: OAuth access token or session id.
            api_version: REST API version without the leading "v".
            timeout: Per-request timeout in seconds.
            max_connections: Connection pool size.
        """
        self._instance_url = instance_url.rstrip("/")
        self._access_token = access_token
        self._api_version = str(api_version).lstrip("vV")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._max_connections = max_connections
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def instance_url(self) -> str:
        """Org base URL without trailing slash."""
        return self._instance_url

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=self._max_connections)
            self._session = aiohttp.ClientSession(timeout=self._timeout, connector=connector)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
            "User-Agent": Constants.USER_AGENT,
        }

    def query_url(self, soql: str) -> str:
        """Build the Tooling API query URL for a SOQL statement."""
        path = Constants.TOOLING_QUERY_PATH.format(api_version=self._api_version)
        return f"{self._instance_url}{path}?{urllib.parse.urlencode({'q': soql})}"

    async def _get_json(self, url: str, *, context: str) -> Dict[str, Any]:
        """GET a Tooling API URL and decode the JSON body.

        Raises:
            ServiceRequestError: On transport errors, timeouts, non-200
                answers and undecodable bodies.
        """
        if self._session is None:
            await self.start()
        session = self._session
        if session is None:
            raise ServiceRequestError(f"{context} request made without an HTTP session")
        target = safe_url(url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="devhub_client",
                        action="GET",
                        target=target,
                        context=context,
                    ),
                )
            try:
                response = await session.request("GET", url, headers=self._headers())
                try:
                    body = await response.read()
                finally:
                    response.release()
            except asyncio.TimeoutError as exc:
                logger.error("%s request timed out after %s seconds", context, self._timeout.total)
                raise ServiceRequestError(f"{context} request timed out") from exc
            except aiohttp.ClientError as exc:
                logger.error("%s connection error: %s", context, exc)
                raise ServiceRequestError(f"{context} connection error: {exc}") from exc

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response",
                    extra=extra_context(
                        event="http_response",
                        component="devhub_client",
                        action="GET",
                        status_code=response.status,
                        duration_ms=t.duration_ms(),
                        target=target,
                        context=context,
                    ),
                )

        if response.status != 200:
            raise ServiceRequestError(
                f"{context} failed with HTTP {response.status}: {_error_message(body)}",
                status=response.status,
            )
        try:
            data = json.loads(body.decode("utf-8")) if body else {}
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ServiceRequestError(f"{context} returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise ServiceRequestError(f"{context} returned an unexpected payload")
        return data

    async def query(self, soql: str, *, context: str = "tooling query") -> List[Dict[str, Any]]:
        """Run a Tooling API query, following nextRecordsUrl until done."""
        records: List[Dict[str, Any]] = []
        url: Optional[str] = self.query_url(soql)
        while url:
            data = await self._get_json(url, context=context)
            records.extend(data.get("records") or [])
            next_url = data.get("nextRecordsUrl")
            url = f"{self._instance_url}{next_url}" if next_url and not data.get("done", True) else None
        return records

    async def report(self, package_version_id: str, verbose: bool = False) -> PackageVersionReport:
        """Fetch version metadata, plus dependency ids when verbose."""
        version_id = _validate_id(package_version_id)
        key = "SubscriberPackageVersionId" if version_id.startswith(SUBSCRIBER_VERSION_PREFIX) else "Id"
        records = await self.query(
            "SELECT Id, Package2Id, SubscriberPackageVersionId, "
            f"{', '.join(VERSION_FIELDS)} FROM Package2Version WHERE {key} = '{version_id}'",
            context=f"package version {version_id}",
        )
        if not records:
            return PackageVersionReport()

        record = records[0]
        report = PackageVersionReport(
            package_id=record.get("Package2Id"),
            version=version_from_record(record),
            subscriber_version_id=record.get("SubscriberPackageVersionId"),
        )
        if verbose and report.subscriber_version_id:
            report.dependency_ids = await self._dependency_ids(report.subscriber_version_id)
        return report

    async def _dependency_ids(self, subscriber_version_id: str) -> List[str]:
        # Dependencies is only selectable when filtering on a single Id.
        records = await self.query(
            "SELECT Dependencies FROM SubscriberPackageVersion "
            f"WHERE Id = '{_validate_id(subscriber_version_id)}'",
            context=f"dependencies of {subscriber_version_id}",
        )
        if not records:
            return []
        dependencies = records[0].get("Dependencies") or {}
        return [
            item["subscriberPackageVersionId"]
            for item in dependencies.get("ids") or []
            if item.get("subscriberPackageVersionId")
        ]

    async def list_packages(self) -> List[PackageListing]:
        """Return every Package2 visible to the session."""
        records = await self.query("SELECT Id, Name FROM Package2", context="package listing")
        return [
            PackageListing(package_id=record["Id"], name=record["Name"])
            for record in records
            if record.get("Id") and record.get("Name")
        ]


def _error_message(body: bytes) -> str:
    """Extract the first error message from a REST error body."""
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, AttributeError):
        return (body or b"").decode("utf-8", "replace")[:200]
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return f"{data[0].get('errorCode', 'ERROR')}: {data[0].get('message', '')}"
    return str(data)[:200]
