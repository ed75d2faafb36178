"""Stats command for showing statistics of a generated SBOM."""

import json
import logging
from collections import Counter
from typing import Dict, Optional, Set

logger = logging.getLogger(__name__)


def _component_licenses(component: Dict) -> str:
    names = []
    for entry in component.get('licenses', []):
        if 'expression' in entry:
            names.append(entry['expression'])
            continue
        license_obj = entry.get('license', {})
        name = license_obj.get('id') or license_obj.get('name')
        if name:
            names.append(name)
    return ' AND '.join(names) if names else 'UNKNOWN'


def collect_stats(sbom: Dict, scope_filter: Optional[str] = None) -> Dict:
    """Compute package, edge and license counts of an SBOM document."""
    all_components = sbom.get('components', [])

    if scope_filter:
        components = [c for c in all_components if c.get('scope', 'required') == scope_filter]
    else:
        components = all_components

    filtered_refs: Set[str] = {c.get('bom-ref') for c in components if c.get('bom-ref')}

    edge_count = 0
    for dep in sbom.get('dependencies', []):
        for dep_ref in dep.get('dependsOn', []):
            if dep_ref in filtered_refs:
                edge_count += 1

    root = sbom.get('metadata', {}).get('component')
    license_counts = Counter(_component_licenses(c) for c in components)

    return {
        'root': f"{root.get('name')}@{root.get('version')}" if root else None,
        'total_packages': len(components),
        'edges': edge_count,
        'licenses': dict(license_counts),
    }


def show_stats(sbom_path: str, scope_filter: str = None) -> None:
    """Show statistics about an SBOM file.

    Args:
        sbom_path: Path to SBOM file
        scope_filter: Optional scope to filter by (e.g., 'required', 'excluded', 'optional')
    """
    with open(sbom_path, 'r') as f:
        sbom = json.load(f)

    stats = collect_stats(sbom, scope_filter)
    logger.debug(f"Computed stats for {sbom_path}")

    print("SBOM Statistics:")
    if scope_filter:
        print(f"  Scope filter: {scope_filter}")
    print(f"  Product: {stats['root'] or 'unknown'}")
    print(f"  Total Packages: {stats['total_packages']}")
    print(f"  Dependency Edges: {stats['edges']}")
    print("  Licenses:")
    for license_name, count in sorted(stats['licenses'].items()):
        print(f"    {license_name}: {count}")
