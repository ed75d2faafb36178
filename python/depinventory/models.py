"""Core data models for depinventory."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


DEPENDENCY_KINDS = ("dependencies", "dev_dependencies", "optional_dependencies")


@dataclass
class Package:
    """Represents one package.json manifest with its name, version and declared dependencies."""

    name: Optional[str]
    version: Optional[str]
    package_json: List[str] = field(default_factory=list)  # Every manifest path this package was read from
    license: Optional[str] = None
    description: Optional[str] = None
    author: Any = None  # string or {"name", "email", "url"}
    contributors: List[Any] = field(default_factory=list)
    repository: Any = None  # string or {"type", "url"}
    homepage: Optional[str] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    optional_dependencies: Dict[str, str] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        """Return the package identity in name@version format."""
        return f"{self.name}@{self.version}"

    def is_same_package(self, other: 'Package') -> bool:
        """Check whether two manifests describe the same name and version."""
        return self.name == other.name and self.version == other.version

    def declared(self, kind: str) -> Dict[str, str]:
        """Return the declared dependency map for one of DEPENDENCY_KINDS."""
        return getattr(self, kind)

    def __str__(self) -> str:
        return self.full_name

    def __hash__(self) -> int:
        return hash(self.full_name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Package):
            return False
        return self.full_name == other.full_name


@dataclass
class DependencyNode:
    """Represents a node in the resolved dependency graph (not a tree - nodes can be shared)."""

    package: Package
    is_root: bool = False
    dependencies: List['DependencyNode'] = field(default_factory=list, compare=False, hash=False)
    dev_dependencies: List['DependencyNode'] = field(default_factory=list, compare=False, hash=False)
    optional_dependencies: List['DependencyNode'] = field(default_factory=list, compare=False, hash=False)

    def __eq__(self, other) -> bool:
        """Equality based on object identity for graph node sharing."""
        return self is other

    def __hash__(self) -> int:
        """Hash based on object identity for graph node sharing."""
        return id(self)

    def __repr__(self) -> str:
        return f"DependencyNode({self.package.full_name})"

    def add_dependency(self, kind: str, child: 'DependencyNode') -> None:
        """Add a resolved edge of the given kind."""
        getattr(self, kind).append(child)

    def references(self, other: 'DependencyNode') -> bool:
        """Check whether this node lists other in any of its resolved edge lists."""
        return (
            other in self.dependencies
            or other in self.dev_dependencies
            or other in self.optional_dependencies
        )

    def mark_as_root(self) -> None:
        """Mark this node as the product root."""
        self.is_root = True

    def get_tree_representation(self, prefix: str = "", is_last: bool = True, depth: int = 0,
                                visited: set = None, label: str = "") -> str:
        """Generate a tree visualization string following all three edge kinds."""
        if visited is None:
            visited = set()

        lines = []
        connector = "└── " if is_last else "├── "
        node_id = f"{label}{self.package.full_name}"

        if self in visited:
            if depth == 0:
                lines.append(f"{node_id} (cycle)")
            else:
                lines.append(f"{prefix}{connector}{node_id} (cycle)")
            return "\n".join(lines)

        visited.add(self)

        if depth == 0:
            lines.append(node_id)
        else:
            lines.append(f"{prefix}{connector}{node_id}")

        children = [("", child) for child in self.dependencies]
        children += [("[dev] ", child) for child in self.dev_dependencies]
        children += [("[optional] ", child) for child in self.optional_dependencies]

        for i, (child_label, child) in enumerate(children):
            is_last_child = (i == len(children) - 1)
            if depth == 0:
                child_prefix = ""
            else:
                child_prefix = prefix + ("    " if is_last else "│   ")
            lines.append(child.get_tree_representation(
                child_prefix, is_last_child, depth + 1, visited, child_label
            ))

        return "\n".join(lines)


@dataclass
class CollectPackageError:
    """A manifest whose content could not be parsed."""

    package_file_path: str

    def to_dict(self) -> Dict[str, str]:
        return {"packageFilePath": self.package_file_path}


@dataclass
class ResolutionOutcome:
    """Partition of one declared dependency map into found packages and missing entries."""

    found: List[Package] = field(default_factory=list)
    missing: Dict[str, str] = field(default_factory=dict)


@dataclass
class CollectResult:
    """Pruned dependency graph plus the manifests that could not be read."""

    result: List[DependencyNode]
    invalid_packages: List[CollectPackageError]
    root: Optional[DependencyNode] = None

    @property
    def packages(self) -> List[Package]:
        return [node.package for node in self.result]

    def to_dict(self) -> Dict[str, Any]:
        """Render the graph as plain data, edges expressed as name@version references."""
        records = []
        for node in self.result:
            pkg = node.package
            record = {
                "name": pkg.name,
                "version": pkg.version,
                "license": pkg.license,
                "packageJson": list(pkg.package_json),
            }
            record["packageDependencies"] = [dep.package.full_name for dep in node.dependencies]
            record["packageDevDependencies"] = [dep.package.full_name for dep in node.dev_dependencies]
            record["packageOptionalDependencies"] = [
                dep.package.full_name for dep in node.optional_dependencies
            ]
            records.append(record)

        return {
            "result": records,
            "invalidPackages": [error.to_dict() for error in self.invalid_packages],
        }
