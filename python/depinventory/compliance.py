"""License and dependency completeness checks over a collected package graph."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Sequence, Union

from .graph_builder import resolve
from .models import DependencyNode, Package

logger = logging.getLogger(__name__)


@dataclass
class InvalidPackageContent:
    """Packages failing the license allow-list or the copyright evaluation."""

    copyright: List[Package] = field(default_factory=list)
    license: List[Package] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.copyright or self.license)


@dataclass
class MissingPackages:
    """Declared dependencies of one package that no collected package satisfies."""

    package_reference: DependencyNode
    missing_dependencies: Dict[str, str]
    missing_dev_dependencies: Dict[str, str]
    missing_optional_dependencies: Dict[str, str]


def _as_package(item: Union[Package, DependencyNode]) -> Package:
    if isinstance(item, DependencyNode):
        return item.package
    return item


def has_copyright_holder(package: Package) -> bool:
    """Default copyright evaluation: the manifest names an author or a contributor."""
    author = package.author
    if isinstance(author, dict):
        author = author.get("name")
    if author:
        return True
    return any(package.contributors)


def find_invalid_package_content(
    packages: Sequence[Union[Package, DependencyNode]],
    allowed_licenses: Collection[str],
    evaluate_copyright_info: Callable[[Package], bool],
) -> InvalidPackageContent:
    """
    Split out packages with a license outside the allow-list or a rejected copyright.

    A package without a license never matches the allow-list. A package may
    appear in both lists.
    """
    invalid = InvalidPackageContent()
    for item in packages:
        package = _as_package(item)
        if package.license is None or package.license not in allowed_licenses:
            invalid.license.append(package)

        if not evaluate_copyright_info(package):
            invalid.copyright.append(package)

    logger.debug(
        f"{len(invalid.license)} license violations, {len(invalid.copyright)} copyright violations"
    )
    return invalid


def find_missing_packages(nodes: Sequence[DependencyNode], exact_only: bool = False) -> List[MissingPackages]:
    """Report each node that declares dependencies absent from the given nodes."""
    packages = [node.package for node in nodes]
    missing: List[MissingPackages] = []

    for node in nodes:
        package = node.package
        missing_dependencies = resolve(package.dependencies, packages, exact_only).missing
        missing_dev_dependencies = resolve(package.dev_dependencies, packages, exact_only).missing
        missing_optional_dependencies = resolve(package.optional_dependencies, packages, exact_only).missing

        if missing_dependencies or missing_dev_dependencies or missing_optional_dependencies:
            missing.append(MissingPackages(
                package_reference=node,
                missing_dependencies=missing_dependencies,
                missing_dev_dependencies=missing_dev_dependencies,
                missing_optional_dependencies=missing_optional_dependencies,
            ))

    return missing
