"""Read and write the project manifest file."""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from typing import Any, Dict

from constants import Constants
from errors import ManifestParseError
from .models import Manifest

logger = logging.getLogger(__name__)


def load_manifest(path: str) -> Manifest:
    """Load and validate a project manifest.

    Args:
        path: Path to sfdx-project.json.

    Raises:
        ManifestParseError: File missing/unreadable, invalid JSON or wrong shape.
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            document = json.load(file)
    except FileNotFoundError as exc:
        raise ManifestParseError(f"Project file not found: {path}") from exc
    except OSError as exc:
        raise ManifestParseError(f"Project file could not be read: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ManifestParseError(f"Project file is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"Project file is not valid JSON: {exc}") from exc
    manifest = Manifest.from_document(document)
    logger.debug("Loaded %d dependencies and %d aliases from %s",
                 len(manifest.dependencies), len(manifest.aliases), path)
    return manifest


def dump_document(document: Dict[str, Any]) -> str:
    """Serialise a project document the way it is written to disk."""
    return json.dumps(document, indent=Constants.JSON_INDENT, ensure_ascii=False)


def _copy_mode(path: str, tmp_path: str) -> None:
    """Give the replacement file the permissions the project file has, or would get."""
    if os.path.exists(path):
        shutil.copymode(path, tmp_path)
        return
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(tmp_path, 0o666 & ~umask)


def save_manifest(path: str, manifest: Manifest) -> None:
    """Write the manifest back, replacing the file atomically."""
    text = dump_document(manifest.to_document())
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".depupdate-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as file:
            file.write(text)
        _copy_mode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    logger.info("Project file has been successfully written at: %s", path)
