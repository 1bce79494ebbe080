"""Update a project's dependency pins from a root package's dependency graph.

Loads the manifest, walks the graph, reconciles and writes the file back.
The file is only written after the walk and the reconciliation both
succeeded, so a failed run leaves it untouched.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from constants import Constants
from errors import AliasNotFoundWarning, ResolutionError
from manifest.document import load_manifest, save_manifest
from registry.client import DistributionServiceClient
from resolution.aliases import AliasResolver
from resolution.reconciler import reconcile
from resolution.walker import DependencyGraphWalker
from versioning.models import PackageRecord

logger = logging.getLogger(__name__)


@dataclass
class UpdateReport:
    """What an update run found and changed."""
    resolved: List[PackageRecord] = field(default_factory=list)
    updates: List[PackageRecord] = field(default_factory=list)
    added_aliases: Dict[str, str] = field(default_factory=dict)
    warnings: List[AliasNotFoundWarning] = field(default_factory=list)
    written: bool = False

    def to_json(self) -> List[Dict[str, Any]]:
        """Result payload for --json: the updated packages."""
        return [record.to_dict() for record in self.updates]


async def update_dependencies(
    client: DistributionServiceClient,
    project_file: str,
    package_id: str,
    *,
    dry_run: bool = False,
    max_concurrency: int = Constants.MAX_CONCURRENCY,
) -> UpdateReport:
    """Resolve package_id's dependencies and pin them in project_file.

    Args:
        client: Distribution service capability.
        project_file: Path to sfdx-project.json.
        package_id: Root package version id, or an alias of one.
        dry_run: Compute everything but do not write the file.
        max_concurrency: Bound on concurrent dependency fetches.

    Raises:
        ManifestParseError: Before any request when the file is malformed.
        ResolutionError: When package_id names a package rather than a
            version, or the graph cannot be resolved completely.
    """
    manifest = load_manifest(project_file)
    root_id = manifest.aliases.get(package_id) or package_id
    if root_id != package_id:
        logger.info("Using %s for alias %s", root_id, package_id)
    if root_id.startswith(Constants.PACKAGE_ID_PREFIX):
        raise ResolutionError(
            f"{package_id} names a package ({root_id}), not a package version; "
            "pass a 04t id or a version alias such as Pkg@1.0.0-1",
            root_id,
        )

    resolver = AliasResolver(client, manifest.aliases)
    walker = DependencyGraphWalker(client, resolver, max_concurrency=max_concurrency)
    resolved = await walker.resolve(root_id)

    result = reconcile(resolved, manifest)
    manifest.dependencies = result.dependencies
    manifest.aliases = result.aliases

    report = UpdateReport(
        resolved=resolved,
        updates=result.updates,
        added_aliases=result.added_aliases,
        warnings=list(resolver.warnings),
    )
    if not result.changed:
        logger.info("All dependencies are up to date")
    elif dry_run:
        logger.info("Dry run: %d update(s) not written to %s", len(result.updates), project_file)
    else:
        save_manifest(project_file, manifest)
        report.written = True
    return report


def run_update_sync(
    client: DistributionServiceClient,
    project_file: str,
    package_id: str,
    **kwargs: Any,
) -> UpdateReport:
    """Run update_dependencies on a fresh event loop, managing the client session."""

    async def run() -> UpdateReport:
        async with client:
            return await update_dependencies(client, project_file, package_id, **kwargs)

    return asyncio.run(run())
