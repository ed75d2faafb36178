"""Builds the resolved dependency graph from package manifests using a two-phase approach."""

import logging
from typing import Dict, List, Optional, Sequence

from .models import DEPENDENCY_KINDS, DependencyNode, Package, ResolutionOutcome
from .version_matcher import VersionMatcher

logger = logging.getLogger(__name__)


def group_same_packages(packages: Sequence[Package]) -> List[Package]:
    """
    Collapse manifests sharing name and version into one package.

    The first manifest seen wins for every field; later duplicates only
    contribute their manifest paths to its package_json list.
    """
    uniques: List[Package] = []
    for package in packages:
        found = None
        for unique in uniques:
            if unique is not package and unique.is_same_package(package):
                found = unique
                break

        if found is None:
            uniques.append(package)
            continue

        found.package_json.extend(package.package_json)
        logger.debug(f"Merged duplicate manifest of {package.full_name}: {package.package_json}")

    return uniques


def resolve(dependencies: Optional[Dict[str, str]], packages: Sequence[Package],
            exact_only: bool = False) -> ResolutionOutcome:
    """
    Match each declared dependency against the known packages.

    The first package with the same name and a satisfying version is taken;
    entries without any such package are reported as missing.

    Args:
        dependencies: Declared name -> specifier map (None is treated as empty)
        packages: Known packages, searched in order
        exact_only: Disable npm range evaluation

    Returns:
        ResolutionOutcome with found packages (in declaration order) and missing entries
    """
    outcome = ResolutionOutcome()
    if not dependencies:
        return outcome

    for name, specifier in dependencies.items():
        referenced = None
        for package in packages:
            if package.name != name:
                continue
            if VersionMatcher.matches(package.version, specifier, exact_only):
                referenced = package
                break

        if referenced is None:
            outcome.missing[name] = specifier
        else:
            outcome.found.append(referenced)

    return outcome


def remove_unreferenced(nodes: Sequence[DependencyNode],
                        root: Optional[DependencyNode]) -> List[DependencyNode]:
    """
    Drop every node that no other node references.

    The root is always kept. References are evaluated once against the full,
    unpruned node list, so a group of nodes referencing each other survives
    even when the root does not reach it.
    """
    kept = []
    for node in nodes:
        if node is root:
            kept.append(node)
            continue

        for other in nodes:
            if other is node:
                continue
            if other.references(node):
                kept.append(node)
                break
        else:
            logger.debug(f"Pruning unreferenced package {node.package.full_name}")

    return kept


class DependencyGraphBuilder:
    """
    Builds the dependency graph of a set of packages using a two-phase approach:

    Phase 1: Create one DependencyNode per package
    - Nodes keep the input order
    - Base packages are never modified

    Phase 2: Resolve and link
    - Resolve each package's dependencies, devDependencies and optionalDependencies
      against the full package list (the package itself included)
    - Link the node to the nodes of the found packages, one edge list per kind
    """

    def __init__(self, exact_only: bool = False):
        """Initialize the graph builder."""
        self.exact_only = exact_only

    def build(self, packages: Sequence[Package]) -> List[DependencyNode]:
        """Build and link a fresh set of nodes for the given packages."""
        logger.debug(f"Building dependency graph for {len(packages)} packages")

        # PHASE 1: One node per package, registry scoped to this build
        nodes_by_package: Dict[int, DependencyNode] = {}  # id(package) -> node
        nodes = [self._node_for(package, nodes_by_package) for package in packages]

        # PHASE 2: Resolve declared dependencies and link nodes
        edge_count = 0
        for node in nodes:
            for kind in DEPENDENCY_KINDS:
                outcome = resolve(node.package.declared(kind), packages, self.exact_only)
                for found in outcome.found:
                    node.add_dependency(kind, nodes_by_package[id(found)])
                    edge_count += 1
                if outcome.missing:
                    logger.debug(f"{node.package.full_name} has unresolved {kind}: {outcome.missing}")

        logger.debug(f"Linked {edge_count} edges between {len(nodes)} nodes")
        return nodes

    @staticmethod
    def _node_for(package: Package, nodes_by_package: Dict[int, DependencyNode]) -> DependencyNode:
        node = nodes_by_package.get(id(package))
        if node is None:
            node = DependencyNode(package=package)
            nodes_by_package[id(package)] = node
        return node
