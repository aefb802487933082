"""
skillreg - Namespaced, versioned skill registry

Publish immutable markdown skills under @namespace/name, versioned by
semver, and read them back by version, by latest stable release, or by
listing what a namespace holds.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("skillreg")
except PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "__version__",
]
