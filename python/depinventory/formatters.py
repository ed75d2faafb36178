"""Output formatters for various formats."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence
from uuid import uuid4

from packageurl import PackageURL
from cyclonedx.exception.model import InvalidUriException
from cyclonedx.contrib.license.factories import LicenseFactory
from cyclonedx.model import ExternalReference, ExternalReferenceType, XsUri
from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentType, ComponentScope
from cyclonedx.model.contact import OrganizationalContact
from cyclonedx.output.json import JsonV1Dot6

from .models import CollectResult, DependencyNode, Package
from .sections import gather_license_sections

logger = logging.getLogger(__name__)


class OutputFormatter:
    """Formatter for various output formats."""

    @staticmethod
    def format_as_list(packages: Sequence[Package]) -> str:
        """Format packages as a flat list (one per line)."""
        lines = [pkg.full_name for pkg in packages]
        return '\n'.join(lines) + '\n'

    @staticmethod
    def format_as_tree(collected: CollectResult) -> str:
        """Format as a tree visualization starting at the product root."""
        lines = ["Dependency Tree:", ""]

        if collected.root is not None:
            lines.append(collected.root.get_tree_representation())
        else:
            lines.append("(product manifest unreadable, no root)")

        lines.extend([
            "",
            "Dependency Statistics:",
            f"  Total Packages: {len(collected.result)}",
            f"  Invalid Manifests: {len(collected.invalid_packages)}"
        ])

        return '\n'.join(lines) + '\n'

    @staticmethod
    def format_as_license_report(collected: CollectResult) -> str:
        """Format packages grouped by license, followed by the unreadable manifests."""
        lines = []
        for section in gather_license_sections(collected.packages):
            license_name = section.license_name or "UNKNOWN"
            lines.append(f"{license_name} ({len(section.libraries)})")
            for pkg in section.libraries:
                lines.append(f"  {pkg.full_name}")
            lines.append("")

        if collected.invalid_packages:
            lines.append("Unreadable manifests:")
            for error in collected.invalid_packages:
                lines.append(f"  {error.package_file_path}")
            lines.append("")

        return '\n'.join(lines)

    @staticmethod
    def format_as_json(collected: CollectResult) -> str:
        """Format the collected graph as JSON (edges as name@version references)."""
        return json.dumps(collected.to_dict(), indent=2) + '\n'

    @staticmethod
    def format_as_sbom(collected: CollectResult) -> str:
        """Generate a CycloneDX SBOM in JSON format."""
        from . import __version__

        bom = Bom()
        bom.serial_number = uuid4()
        bom.metadata.timestamp = datetime.now(timezone.utc).replace(microsecond=0)

        tool_component = Component(
            name="depinventory",
            version=__version__,
            type=ComponentType.APPLICATION,
            bom_ref=f"pkg:pypi/depinventory@{__version__}",
            purl=PackageURL(type="pypi", name="depinventory", version=__version__),
        )
        bom.metadata.tools.components.add(tool_component)

        components = {}
        ref_counts = {}
        for node in collected.result:
            # The product may share name@version with an installed copy; later copies get "#<n>"
            purl_str = OutputFormatter._build_purl(node.package).to_string()
            ref_counts[purl_str] = ref_counts.get(purl_str, 0) + 1
            bom_ref = purl_str if ref_counts[purl_str] == 1 else f"{purl_str}#{ref_counts[purl_str]}"

            component = OutputFormatter._package_to_component(node.package, bom_ref)
            components[node] = component
            if node is collected.root:
                component.type = ComponentType.APPLICATION
                bom.metadata.component = component
            else:
                component.scope = OutputFormatter._node_scope(node, collected.result)
                bom.components.add(component)

        for node in collected.result:
            depends_on = []
            for kind_edges in (node.dependencies, node.dev_dependencies, node.optional_dependencies):
                for dep in kind_edges:
                    dep_component = components.get(dep)
                    if dep_component is not None and dep_component not in depends_on:
                        depends_on.append(dep_component)
            bom.register_dependency(components[node], depends_on)

        outputter = JsonV1Dot6(bom)
        return outputter.output_as_string(indent=2)

    @staticmethod
    def _node_scope(node: DependencyNode, nodes: Sequence[DependencyNode]) -> ComponentScope:
        """
        Map the edge kinds pointing at a node to a CycloneDX ComponentScope.

          any runtime edge -> REQUIRED
          only optional (and dev) edges -> OPTIONAL
          only dev edges -> EXCLUDED
        """
        optional = False
        for other in nodes:
            if other is node:
                continue
            if node in other.dependencies:
                return ComponentScope.REQUIRED
            if node in other.optional_dependencies:
                optional = True

        if optional:
            return ComponentScope.OPTIONAL
        return ComponentScope.EXCLUDED

    @staticmethod
    def _package_to_component(pkg: Package, bom_ref: Optional[str] = None) -> Component:
        """Convert a Package to a CycloneDX Component (bom-ref defaults to the purl)."""
        group, name = OutputFormatter._split_scope(pkg)
        purl_obj = OutputFormatter._build_purl(pkg)
        ref = bom_ref or purl_obj.to_string()

        licenses = []
        if pkg.license:
            licenses.append(LicenseFactory().make_from_string(pkg.license))

        external_references = []
        homepage = OutputFormatter._to_uri(pkg.homepage)
        if homepage:
            external_references.append(ExternalReference(type=ExternalReferenceType.WEBSITE, url=homepage))
        repository = pkg.repository
        if isinstance(repository, dict):
            repository = repository.get("url")
        repository = OutputFormatter._to_uri(repository)
        if repository:
            external_references.append(ExternalReference(type=ExternalReferenceType.VCS, url=repository))

        component = Component(
            name=name,
            version=pkg.version,
            type=ComponentType.LIBRARY,
            group=group,
            purl=purl_obj,
            bom_ref=ref,
            description=pkg.description if isinstance(pkg.description, str) else None,
            licenses=licenses,
            external_references=external_references,
        )

        author_name = OutputFormatter._author_name(pkg.author)
        if author_name:
            component.authors.add(OrganizationalContact(name=author_name))

        return component

    @staticmethod
    def _author_name(author: Any) -> Optional[str]:
        if isinstance(author, dict):
            author = author.get("name")
        if isinstance(author, str) and author.strip():
            return author.strip()
        return None

    @staticmethod
    def _to_uri(value: Any) -> Optional[XsUri]:
        if not isinstance(value, str) or not value:
            return None
        try:
            return XsUri(value)
        except InvalidUriException:
            logger.debug(f"Skipping invalid URI: {value}")
            return None

    @staticmethod
    def _build_purl(pkg: Package) -> PackageURL:
        """Build a Package URL (purl) for an npm package, splitting off the @scope."""
        namespace, name = OutputFormatter._split_scope(pkg)
        return PackageURL(type="npm", namespace=namespace, name=name, version=pkg.version)

    @staticmethod
    def _split_scope(pkg: Package):
        """Split "@scope/name" into ("@scope", "name"); unscoped names have no scope."""
        name = pkg.name or "unknown"
        if name.startswith('@') and '/' in name:
            namespace, name = name.split('/', 1)
            return namespace, name
        return None, name

    @staticmethod
    def summarize(collected: CollectResult) -> List[str]:
        """Short human-readable summary lines."""
        return [
            f"Packages: {len(collected.result)}",
            f"Unreadable manifests: {len(collected.invalid_packages)}",
        ]
