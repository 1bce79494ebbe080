"""Version comparison policy and resolved package records."""

from .comparator import is_newer, pin_latest
from .models import PackageRecord, VersionString

__all__ = ["is_newer", "pin_latest", "PackageRecord", "VersionString"]
