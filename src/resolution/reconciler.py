"""Merge resolved package versions into the manifest's dependency list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from manifest.models import AliasTable, Manifest, ManifestEntry
from versioning.comparator import is_newer, pin_latest
from versioning.models import PackageRecord

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""
    dependencies: List[ManifestEntry]
    aliases: AliasTable
    updates: List[PackageRecord] = field(default_factory=list)
    added_aliases: Dict[str, str] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.updates or self.added_aliases)


def reconcile(
    resolved: Sequence[PackageRecord],
    manifest: Manifest,
    root_package_id: Optional[str] = None,
) -> ReconcileResult:
    """Decide per resolved record whether to update, insert or keep an entry.

    Entries matched by alias are updated in place when the resolved version
    is newer; unmatched records become new entries pinned to
    ``<prefix>.LATEST``. Entries touched by the pass come first in resolved
    order, followed by every other existing entry in its original order.

    Args:
        resolved: Walker output, root record last.
        manifest: Manifest whose entries and alias table are mutated.
        root_package_id: When given, the last resolved record must be this
            package.

    Raises:
        ValueError: If root_package_id does not match the last record.
    """
    if root_package_id is not None and (not resolved or resolved[-1].package_id != root_package_id):
        raise ValueError(f"resolved records must end with root package {root_package_id}")

    aliases = manifest.aliases
    seen: Dict[str, ManifestEntry] = {}
    updates: Dict[str, PackageRecord] = {}

    for record in resolved:
        alias = record.package_alias
        entry = seen.get(alias) or manifest.entry_for(alias)

        if entry is None:
            if alias not in aliases:
                aliases.register(alias, record.package_id)
            entry = ManifestEntry(package=alias, version_number=pin_latest(record.package_version))
            logger.info("Adding %s at version %s", alias, entry.version_number)
            updates[alias] = record
        elif entry.version_number is None:
            logger.info("Skipping %s: pinned to a package version id", alias)
        else:
            logger.info(
                "Comparing Package %s: original is %s and needed is %s",
                alias, entry.version_number, record.package_version,
            )
            if is_newer(entry.version_number, record.package_version):
                entry.version_number = pin_latest(record.package_version)
                logger.info("Updating %s to version %s", alias, record.package_version)
                updates[alias] = record
        seen[alias] = entry

    processed = {id(entry) for entry in seen.values()}
    untouched = [entry for entry in manifest.dependencies if id(entry) not in processed]
    return ReconcileResult(
        dependencies=[*seen.values(), *untouched],
        aliases=aliases,
        updates=list(updates.values()),
        added_aliases=dict(aliases.added),
    )
