"""Data models for version comparison and dependency resolution."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class PackageRecord:
    """A resolved dependency as reported by the distribution service."""
    package_id: str  # Package2 id (0Ho...), the key used in packageAliases
    package_alias: str
    package_version: str  # dotted numeric, e.g. "1.4.0.12"

    def to_dict(self) -> Dict[str, str]:
        """Serialise using the field names of the command's JSON result."""
        return {
            "packageId": self.package_id,
            "packageAlias": self.package_alias,
            "packageVersion": self.package_version,
        }


# Type alias for dot-separated version strings ("1.2.0.LATEST" included).
VersionString = str
