"""depinventory - inventory and prune the npm packages bundled into a product."""

__version__ = "1.0.0"

from .collector import collect_package_infos
from .compliance import find_invalid_package_content, find_missing_packages
from .models import CollectPackageError, CollectResult, DependencyNode, Package

__all__ = [
    "__version__",
    "collect_package_infos",
    "find_invalid_package_content",
    "find_missing_packages",
    "CollectPackageError",
    "CollectResult",
    "DependencyNode",
    "Package",
]
