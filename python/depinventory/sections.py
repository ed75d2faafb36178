"""Grouping of packages into per-license report sections."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from .models import Package


@dataclass
class LicenseSection:
    license_name: Optional[str]
    libraries: List[Package] = field(default_factory=list)


@dataclass
class LicenseMeta:
    """Caller-supplied data attached to the section of one license (e.g. its full text)."""

    license_name: str
    meta: Any


@dataclass
class LicenseSectionWithMeta(LicenseSection):
    meta: Any = None


def gather_license_sections(packages: Sequence[Package]) -> List[LicenseSection]:
    """Group packages by license, sections ordered by license name and libraries by name."""
    ordered = sorted(packages, key=lambda p: p.license or "")

    sections: List[LicenseSection] = []
    for package in ordered:
        if not sections or sections[-1].license_name != package.license:
            sections.append(LicenseSection(license_name=package.license))
        sections[-1].libraries.append(package)

    for section in sections:
        section.libraries.sort(key=lambda p: p.name or "")

    return sections


def attach_meta(sections: Sequence[LicenseSection], metas: Sequence[LicenseMeta]) -> List[LicenseSectionWithMeta]:
    """Pair each section with the first meta entry for the same license, if any."""
    result = []
    for section in sections:
        meta = next((m.meta for m in metas if m.license_name == section.license_name), None)
        result.append(LicenseSectionWithMeta(
            license_name=section.license_name,
            libraries=list(section.libraries),
            meta=meta,
        ))
    return result
