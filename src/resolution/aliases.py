"""Alias resolution: local table, then the service listing, then the raw id."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from errors import AliasNotFoundWarning, ServiceRequestError
from manifest.models import AliasTable
from registry.client import DistributionServiceClient

logger = logging.getLogger(__name__)


class AliasResolver:
    """Map package ids to human readable aliases, registering new ones.

    The alias table is shared with the manifest. Lookups run without
    locking; registration is serialized by an asyncio.Lock so concurrent
    resolutions of the same id register at most one mapping.
    """

    def __init__(self, client: DistributionServiceClient, aliases: AliasTable):
        self._client = client
        self._aliases = aliases
        self._lock = asyncio.Lock()
        self._listing: Optional[Dict[str, str]] = None
        self.warnings: List[AliasNotFoundWarning] = []

    @property
    def aliases(self) -> AliasTable:
        return self._aliases

    async def resolve(self, package_id: str) -> str:
        """Return the alias for package_id, registering one when needed."""
        alias = self._aliases.alias_for(package_id)
        if alias is not None:
            return alias

        async with self._lock:
            # Another task may have registered it while we waited.
            alias = self._aliases.alias_for(package_id)
            if alias is not None:
                return alias

            listing = await self._package_listing()
            name = listing.get(package_id)
            if name:
                bound = self._aliases.get(name)
                if bound is None:
                    self._aliases.register(name, package_id)
                    logger.info("Registered alias %s for package %s", name, package_id)
                    return name
                logger.warning(
                    "Alias %s is already bound to %s; not rebinding it to %s",
                    name, bound, package_id,
                )

            warning = AliasNotFoundWarning(package_id)
            self.warnings.append(warning)
            logger.warning("%s", warning)
            self._aliases.register(package_id, package_id)
            return package_id

    async def _package_listing(self) -> Dict[str, str]:
        """Fetch the package listing once per resolver; failures yield an empty listing."""
        if self._listing is None:
            try:
                packages = await self._client.list_packages()
            except ServiceRequestError as exc:
                logger.warning("Package listing unavailable, aliases fall back to ids: %s", exc)
                packages = []
            self._listing = {pkg.package_id: pkg.name for pkg in packages}
            if is_debug_enabled(logger):
                logger.debug(
                    "Package listing loaded",
                    extra=extra_context(
                        event="listing",
                        component="alias_resolver",
                        count=len(self._listing),
                    ),
                )
        return self._listing
