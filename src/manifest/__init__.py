"""Project manifest model and file access."""

from .document import dump_document, load_manifest, save_manifest
from .models import AliasTable, Manifest, ManifestEntry

__all__ = [
    "AliasTable",
    "Manifest",
    "ManifestEntry",
    "dump_document",
    "load_manifest",
    "save_manifest",
]
