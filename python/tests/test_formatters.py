"""Tests for output formatters."""

import json

import pytest
from depinventory.collector import collect_package_infos
from depinventory.commands.stats import collect_stats
from depinventory.formatters import OutputFormatter
from depinventory.models import Package


@pytest.fixture
def collected(tmp_path, write_manifest):
    write_manifest("node_modules/@scope/lib-a", {
        "name": "@scope/lib-a", "version": "1.2.0", "license": "MIT",
        "author": {"name": "Jane Doe"},
        "homepage": "https://example.com/lib-a",
        "dependencies": {"lib-b": "1.0.0"},
    })
    write_manifest("node_modules/lib-b", {
        "name": "lib-b", "version": "1.0.0",
        "licenses": [{"type": "MIT"}, {"type": "Apache-2.0"}],
    })
    write_manifest("node_modules/lib-dev", {"name": "lib-dev", "version": "3.0.0", "license": "ISC"})
    write_manifest("node_modules/broken", "{")
    root = write_manifest("app", {
        "name": "app", "version": "1.0.0",
        "dependencies": {"@scope/lib-a": "^1.0.0"},
        "devDependencies": {"lib-dev": "^3.0.0"},
    })
    return collect_package_infos(root, [str(tmp_path / "node_modules")])


class TestOutputFormatter:

    def test_format_as_list(self, collected):
        output = OutputFormatter.format_as_list(collected.packages)

        assert output.splitlines() == ["@scope/lib-a@1.2.0", "lib-b@1.0.0", "lib-dev@3.0.0", "app@1.0.0"]

    def test_format_as_tree(self, collected):
        output = OutputFormatter.format_as_tree(collected)

        assert "Dependency Tree:" in output
        assert output.splitlines()[2] == "app@1.0.0"
        assert "@scope/lib-a@1.2.0" in output
        assert "[dev] lib-dev@3.0.0" in output
        assert "Total Packages: 4" in output
        assert "Invalid Manifests: 1" in output

    def test_format_as_license_report(self, collected):
        output = OutputFormatter.format_as_license_report(collected)

        assert "(MIT OR Apache-2.0) (1)" in output
        assert "UNKNOWN (1)" in output
        assert "Unreadable manifests:" in output

    def test_format_as_json(self, collected):
        data = json.loads(OutputFormatter.format_as_json(collected))

        assert [r["name"] for r in data["result"]] == ["@scope/lib-a", "lib-b", "lib-dev", "app"]
        assert len(data["invalidPackages"]) == 1

    def test_format_as_sbom(self, collected):
        sbom = json.loads(OutputFormatter.format_as_sbom(collected))

        assert sbom["bomFormat"] == "CycloneDX"
        assert sbom["specVersion"] == "1.6"
        assert sbom["metadata"]["component"]["name"] == "app"

        components = {c["bom-ref"]: c for c in sbom["components"]}
        assert set(components) == {
            "pkg:npm/%40scope/lib-a@1.2.0",
            "pkg:npm/lib-b@1.0.0",
            "pkg:npm/lib-dev@3.0.0",
        }
        lib_a = components["pkg:npm/%40scope/lib-a@1.2.0"]
        assert lib_a["group"] == "@scope"
        assert lib_a["name"] == "lib-a"
        assert lib_a["scope"] == "required"
        assert components["pkg:npm/lib-dev@3.0.0"]["scope"] == "excluded"

        dependencies = {d["ref"]: d.get("dependsOn", []) for d in sbom["dependencies"]}
        assert dependencies["pkg:npm/%40scope/lib-a@1.2.0"] == ["pkg:npm/lib-b@1.0.0"]
        assert sorted(dependencies["pkg:npm/app@1.0.0"]) == [
            "pkg:npm/%40scope/lib-a@1.2.0",
            "pkg:npm/lib-dev@3.0.0",
        ]

    def test_sbom_stats(self, collected):
        sbom = json.loads(OutputFormatter.format_as_sbom(collected))

        stats = collect_stats(sbom)

        assert stats["root"] == "app@1.0.0"
        assert stats["total_packages"] == 3
        assert stats["edges"] == 3
        assert stats["licenses"]["ISC"] == 1

    def test_sbom_product_sharing_purl_with_dependency(self, tmp_path, write_manifest):
        write_manifest("node_modules/lib", {"name": "lib", "version": "1.0.0", "license": "MIT"})
        root = write_manifest("app", {
            "name": "lib", "version": "1.0.0",
            "dependencies": {"lib": "1.0.0"},
        })
        collected = collect_package_infos(root, [str(tmp_path / "node_modules")])

        sbom = json.loads(OutputFormatter.format_as_sbom(collected))

        assert [c["bom-ref"] for c in sbom["components"]] == ["pkg:npm/lib@1.0.0"]
        assert sbom["metadata"]["component"]["bom-ref"] == "pkg:npm/lib@1.0.0#2"
        dependencies = {d["ref"]: d.get("dependsOn", []) for d in sbom["dependencies"]}
        assert dependencies["pkg:npm/lib@1.0.0#2"] == ["pkg:npm/lib@1.0.0"]
        assert not any(ref.startswith("BomRef") for ref in dependencies)

    def test_build_purl_unscoped(self):
        purl = OutputFormatter._build_purl(Package(name="left-pad", version="1.3.0"))

        assert purl.to_string() == "pkg:npm/left-pad@1.3.0"
