"""Collects package information for a product and its installed dependencies."""

import logging
from typing import Iterable, List

from .graph_builder import DependencyGraphBuilder, group_same_packages, remove_unreferenced
from .models import CollectPackageError, CollectResult, Package
from .parsers import ManifestParser, find_package_files

logger = logging.getLogger(__name__)


def collect_package_infos(product_package_json: str, node_module_paths: Iterable[str],
                          exact_only: bool = False) -> CollectResult:
    """
    Inventory the packages used by a product.

    Every package.json below node_module_paths is read, duplicates are merged,
    dependencies are resolved between all manifests and the product manifest,
    and packages that nothing references are pruned away.

    Args:
        product_package_json: Path to the product's own package.json (the root)
        node_module_paths: Directories searched recursively for package.json files
        exact_only: Match declared versions literally instead of as npm ranges

    Returns:
        CollectResult with the pruned graph and the unreadable manifests.
        result.root is None when the product manifest itself is unreadable.

    Raises:
        OSError: If a directory or the product manifest cannot be accessed
    """
    package_files = find_package_files(node_module_paths)
    logger.info(f"Reading {len(package_files)} dependency manifests")

    packages: List[Package] = []
    invalid_packages: List[CollectPackageError] = []
    for package_file in package_files:
        content = ManifestParser.read(package_file)
        if isinstance(content, CollectPackageError):
            invalid_packages.append(content)
        else:
            packages.append(content)

    packages = group_same_packages(packages)
    logger.info(f"Found {len(packages)} unique packages, {len(invalid_packages)} unreadable manifests")

    product = ManifestParser.read(product_package_json)
    if isinstance(product, CollectPackageError):
        logger.info(f"Product manifest {product_package_json} is unreadable")
        invalid_packages.append(product)
    else:
        packages.append(product)

    nodes = DependencyGraphBuilder(exact_only=exact_only).build(packages)

    root = None
    if not isinstance(product, CollectPackageError):
        root = nodes[-1]
        root.mark_as_root()

    result = remove_unreferenced(nodes, root)
    logger.info(f"Kept {len(result)} of {len(nodes)} packages after pruning")

    return CollectResult(result=result, invalid_packages=invalid_packages, root=root)
