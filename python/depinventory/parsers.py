"""Discovery and parsing of package.json manifests."""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Union

from .models import CollectPackageError, Package

logger = logging.getLogger(__name__)

PACKAGE_FILE_NAME = "package.json"


def find_package_files(node_module_paths: Iterable[str]) -> List[str]:
    """
    Find every package.json below the given directories.

    Directory entries are visited in sorted order so that the resulting list
    (and everything built from it) is deterministic.

    Raises:
        OSError: If a directory cannot be listed
    """
    paths: List[str] = []
    for node_modules_path in node_module_paths:
        found = _find_in_directory(node_modules_path)
        logger.debug(f"Found {len(found)} manifests below {node_modules_path}")
        paths.extend(found)
    return paths


def _find_in_directory(directory: str) -> List[str]:
    files: List[str] = []
    for entry in sorted(os.listdir(directory)):
        abs_item = os.path.join(directory, entry)
        if os.path.isdir(abs_item):
            files.extend(_find_in_directory(abs_item))
        elif entry == PACKAGE_FILE_NAME:
            files.append(abs_item)
    return files


def normalize_license(content: Dict[str, Any]) -> Optional[str]:
    """
    Derive a single license string from a manifest.

    A plain string "license" field wins. Otherwise the types of the legacy
    {"type": ...} object and of the legacy "licenses" array are collected:
    one type is returned as-is, several are joined into "(A OR B)".
    """
    license_field = content.get("license")
    if isinstance(license_field, str) and license_field:
        return license_field

    legacy_licenses = []
    if isinstance(license_field, dict) and license_field.get("type") is not None:
        legacy_licenses.append(license_field)

    licenses_field = content.get("licenses")
    if isinstance(licenses_field, list):
        legacy_licenses.extend(licenses_field)
    elif isinstance(licenses_field, dict):
        legacy_licenses.append(licenses_field)

    types = []
    for legacy in legacy_licenses:
        if isinstance(legacy, dict) and legacy.get("type"):
            types.append(str(legacy["type"]))

    if len(types) > 1:
        return "(" + " OR ".join(types) + ")"
    if len(types) == 1:
        return types[0]
    return None


def _dependency_map(content: Dict[str, Any], key: str) -> Dict[str, str]:
    value = content.get(key)
    if not isinstance(value, dict):
        return {}
    return {str(name): spec for name, spec in value.items()}


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class ManifestParser:
    """Parser turning package.json files into Package records."""

    @staticmethod
    def parse_content(content: Dict[str, Any], package_file_path: str) -> Package:
        """Build a Package from already-decoded manifest content."""
        contributors = content.get("contributors")
        if not isinstance(contributors, list):
            contributors = []

        return Package(
            name=_optional_str(content.get("name")),
            version=_optional_str(content.get("version")),
            package_json=[package_file_path],
            license=normalize_license(content),
            description=content.get("description"),
            author=content.get("author"),
            contributors=contributors,
            repository=content.get("repository"),
            homepage=content.get("homepage"),
            dependencies=_dependency_map(content, "dependencies"),
            dev_dependencies=_dependency_map(content, "devDependencies"),
            optional_dependencies=_dependency_map(content, "optionalDependencies"),
        )

    @classmethod
    def read(cls, package_file_path: str) -> Union[Package, CollectPackageError]:
        """
        Read one manifest.

        Content that is not a UTF-8 JSON object becomes a CollectPackageError.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(package_file_path, 'rb') as f:
            raw = f.read()

        try:
            content = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.debug(f"Unreadable manifest {package_file_path}: {e}")
            return CollectPackageError(package_file_path=package_file_path)

        if not isinstance(content, dict):
            logger.debug(f"Manifest {package_file_path} is not a JSON object")
            return CollectPackageError(package_file_path=package_file_path)

        return cls.parse_content(content, package_file_path)
