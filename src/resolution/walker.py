"""Dependency graph walker: the root version plus its direct subscriber dependencies."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import ResolutionError
from registry.client import DistributionServiceClient, PackageVersionReport
from versioning.models import PackageRecord
from .aliases import AliasResolver

logger = logging.getLogger(__name__)


class DependencyGraphWalker:
    """Resolve a root package version into a flat list of PackageRecords.

    Expansion is one level deep: the root's declared dependencies are
    fetched, their own dependencies are not. Sibling fetches run
    concurrently, at most `max_concurrency` at a time, and the first
    failure cancels the rest.
    """

    def __init__(
        self,
        client: DistributionServiceClient,
        alias_resolver: AliasResolver,
        max_concurrency: int = Constants.MAX_CONCURRENCY,
    ):
        self._client = client
        self._aliases = alias_resolver
        self._max_concurrency = max(1, int(max_concurrency))

    async def resolve(self, root_package_id: str) -> List[PackageRecord]:
        """Return the dependency records followed by the root record.

        Postcondition: the last element is always the root's record, so
        dependency decisions are reconciled before the root's.

        Raises:
            ResolutionError: The root or any dependency came back without an
                identifier or version, or a request failed.
        """
        with Timer() as t:
            report = await self._client.report(root_package_id, verbose=True)
            root = await self._record(root_package_id, report)
            if not report.dependency_ids:
                logger.info("Package %s declares no dependencies", root.package_alias)
                return [root]

            logger.info(
                "Resolving %d dependencies of %s %s",
                len(report.dependency_ids), root.package_alias, root.package_version,
            )
            dependencies = await self._gather(report.dependency_ids)

        if is_debug_enabled(logger):
            logger.debug(
                "Dependency graph resolved",
                extra=extra_context(
                    event="resolve",
                    component="walker",
                    target=root_package_id,
                    count=len(dependencies) + 1,
                    duration_ms=t.duration_ms(),
                ),
            )
        return [*dependencies, root]

    async def _gather(self, dependency_ids: List[str]) -> List[PackageRecord]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch(dependency_id: str) -> PackageRecord:
            async with semaphore:
                report = await self._client.report(dependency_id, verbose=False)
            return await self._record(dependency_id, report)

        tasks = [asyncio.ensure_future(fetch(dep_id)) for dep_id in dependency_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _record(self, requested_id: str, report: PackageVersionReport) -> PackageRecord:
        if not report.package_id or not report.version:
            raise ResolutionError(
                f"No package id or version returned for {requested_id}", requested_id
            )
        alias = await self._aliases.resolve(report.package_id)
        return PackageRecord(
            package_id=report.package_id,
            package_alias=alias,
            package_version=report.version,
        )
