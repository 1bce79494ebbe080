"""Distribution service capability used by the walker and alias resolver."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PackageVersionReport:
    """Metadata for one package version.

    Fields are optional because the service answers unknown identifiers with
    an empty or partial result; callers decide what is fatal.
    """
    package_id: Optional[str] = None  # Package2 id
    version: Optional[str] = None
    subscriber_version_id: Optional[str] = None  # 04t id
    dependency_ids: List[str] = field(default_factory=list)


@dataclass
class PackageListing:
    """A package visible to the authenticated session."""
    package_id: str
    name: str


class DistributionServiceClient(abc.ABC):
    """Read-only view of the package distribution service."""

    @abc.abstractmethod
    async def report(self, package_version_id: str, verbose: bool = False) -> PackageVersionReport:
        """Fetch a package version's metadata.

        Args:
            package_version_id: Subscriber package version id (04t) or
                package version id (05i).
            verbose: Also return the ids of the subscriber versions this
                version depends on.
        """

    @abc.abstractmethod
    async def list_packages(self) -> List[PackageListing]:
        """Return every package visible to the caller's session."""

    async def start(self) -> None:
        """Acquire network resources. Default: nothing to do."""

    async def stop(self) -> None:
        """Release network resources. Default: nothing to do."""

    async def __aenter__(self) -> "DistributionServiceClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
