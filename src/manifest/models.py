"""In-memory model of the project manifest (sfdx-project.json)."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from errors import ManifestParseError

PACKAGE_DIRECTORIES = "packageDirectories"
DEPENDENCIES = "dependencies"
PACKAGE_ALIASES = "packageAliases"


@dataclass
class ManifestEntry:
    """One element of packageDirectories[0].dependencies.

    `raw` keeps the original JSON object so that entries which are not
    updated are written back with the same keys in the same order.
    """
    package: str
    version_number: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "ManifestEntry":
        if not isinstance(data, dict):
            raise ManifestParseError(f"dependencies[{index}] is not an object")
        package = data.get("package")
        if not isinstance(package, str) or not package:
            raise ManifestParseError(f"dependencies[{index}] has no 'package' name")
        version = data.get("versionNumber")
        if version is not None and not isinstance(version, str):
            raise ManifestParseError(f"dependencies[{index}] has a non-string 'versionNumber'")
        return cls(package=package, version_number=version, raw=dict(data))

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data["package"] = self.package
        if self.version_number is not None:
            data["versionNumber"] = self.version_number
        return data


class AliasTable:
    """Ordered alias -> package id mapping with an inverted lookup.

    Mappings registered through `register` during a run are remembered in
    `added` so callers can report them.
    """

    def __init__(self, mapping: Optional[Dict[str, str]] = None):
        self._mapping: Dict[str, str] = dict(mapping or {})
        self.added: Dict[str, str] = {}

    def alias_for(self, package_id: str) -> Optional[str]:
        """Return the first alias (in document order) bound to package_id."""
        for alias, bound_id in self._mapping.items():
            if bound_id == package_id:
                return alias
        return None

    def register(self, alias: str, package_id: str) -> None:
        """Bind alias to package_id; no-op when that exact mapping exists."""
        if self._mapping.get(alias) == package_id:
            return
        self._mapping[alias] = package_id
        self.added[alias] = package_id

    def get(self, alias: str, default: Optional[str] = None) -> Optional[str]:
        return self._mapping.get(alias, default)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._mapping.items())

    def to_dict(self) -> Dict[str, str]:
        return dict(self._mapping)

    def copy(self) -> "AliasTable":
        clone = AliasTable(self._mapping)
        clone.added = dict(self.added)
        return clone

    def __contains__(self, alias: object) -> bool:
        return alias in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"AliasTable({self._mapping!r})"


@dataclass
class Manifest:
    """The dependency list and alias table of a project document.

    Only these two collections are read and replaced; every other field of
    `document` passes through untouched.
    """
    dependencies: List[ManifestEntry]
    aliases: AliasTable
    document: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Any) -> "Manifest":
        """Validate the document shape and build the model.

        Raises:
            ManifestParseError: If the document is not an object, has no
                package directory, or holds malformed dependencies/aliases.
        """
        if not isinstance(document, dict):
            raise ManifestParseError("project file must contain a JSON object")
        directories = document.get(PACKAGE_DIRECTORIES)
        if not isinstance(directories, list) or not directories:
            raise ManifestParseError(f"'{PACKAGE_DIRECTORIES}' must be a non-empty array")
        if not isinstance(directories[0], dict):
            raise ManifestParseError(f"'{PACKAGE_DIRECTORIES}[0]' is not an object")

        raw_deps = directories[0].get(DEPENDENCIES, [])
        if not isinstance(raw_deps, list):
            raise ManifestParseError(f"'{PACKAGE_DIRECTORIES}[0].{DEPENDENCIES}' must be an array")
        dependencies = [ManifestEntry.from_dict(item, i) for i, item in enumerate(raw_deps)]

        raw_aliases = document.get(PACKAGE_ALIASES, {})
        if not isinstance(raw_aliases, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw_aliases.items()
        ):
            raise ManifestParseError(f"'{PACKAGE_ALIASES}' must map alias names to ids")

        return cls(dependencies=dependencies, aliases=AliasTable(raw_aliases), document=document)

    def entry_for(self, package: str) -> Optional[ManifestEntry]:
        for entry in self.dependencies:
            if entry.package == package:
                return entry
        return None

    def to_document(self) -> Dict[str, Any]:
        """Return a copy of the document with dependencies and aliases replaced."""
        document = copy.deepcopy(self.document)
        directories = document.setdefault(PACKAGE_DIRECTORIES, [])
        if not directories:
            directories.append({})
        directories[0][DEPENDENCIES] = [entry.to_dict() for entry in self.dependencies]
        document[PACKAGE_ALIASES] = self.aliases.to_dict()
        return document
