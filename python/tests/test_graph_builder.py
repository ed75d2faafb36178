"""Tests for deduplication, resolution, graph building and pruning."""

from depinventory.graph_builder import (
    DependencyGraphBuilder,
    group_same_packages,
    remove_unreferenced,
    resolve,
)
from depinventory.models import DependencyNode, Package


def make_package(name, version, path=None, **kwargs):
    return Package(name=name, version=version, package_json=[path or f"/nm/{name}/package.json"], **kwargs)


class TestGroupSamePackages:
    """Tests for merging duplicate manifests."""

    def test_duplicates_merge_provenance_in_first_seen_order(self):
        first = make_package("lib-a", "1.0.0", "/one/package.json", license="MIT")
        second = make_package("lib-a", "1.0.0", "/two/package.json", license="ISC")

        uniques = group_same_packages([first, second])

        assert uniques == [first]
        assert uniques[0] is first
        assert first.package_json == ["/one/package.json", "/two/package.json"]
        assert first.license == "MIT"

    def test_different_versions_are_kept(self):
        a1 = make_package("lib-a", "1.0.0")
        a2 = make_package("lib-a", "2.0.0")

        assert group_same_packages([a1, a2]) == [a1, a2]

    def test_grouping_is_idempotent(self):
        packages = [
            make_package("lib-a", "1.0.0", "/1"),
            make_package("lib-b", "1.0.0", "/2"),
            make_package("lib-a", "1.0.0", "/3"),
        ]

        once = group_same_packages(packages)
        paths = [list(p.package_json) for p in once]
        twice = group_same_packages(once)

        assert [p.full_name for p in twice] == [p.full_name for p in once]
        assert [p.package_json for p in twice] == paths


class TestResolve:
    """Tests for resolving a single dependency map."""

    def test_absent_map_gives_empty_outcome(self):
        outcome = resolve(None, [make_package("lib-a", "1.0.0")])

        assert outcome.found == []
        assert outcome.missing == {}

    def test_every_entry_is_found_or_missing(self):
        lib_a = make_package("lib-a", "1.2.0")
        dependencies = {"lib-a": "^1.0.0", "lib-c": "2.0.0", "lib-d": "^1.0.0"}

        outcome = resolve(dependencies, [lib_a, make_package("lib-d", "3.0.0")])

        assert outcome.found == [lib_a]
        assert outcome.missing == {"lib-c": "2.0.0", "lib-d": "^1.0.0"}

    def test_first_match_wins(self):
        first = make_package("lib-a", "1.1.0", "/first")
        second = make_package("lib-a", "1.9.0", "/second")

        outcome = resolve({"lib-a": "^1.0.0"}, [first, second])

        assert outcome.found[0] is first

    def test_exact_only_reports_range_as_missing(self):
        outcome = resolve({"lib-a": "^1.0.0"}, [make_package("lib-a", "1.2.0")], exact_only=True)

        assert outcome.found == []
        assert outcome.missing == {"lib-a": "^1.0.0"}

    def test_invalid_specifier_is_missing(self):
        outcome = resolve({"lib-a": "file:../lib-a"}, [make_package("lib-a", "1.0.0")])

        assert outcome.missing == {"lib-a": "file:../lib-a"}


class TestDependencyGraphBuilder:
    """Tests for linking nodes across all three dependency kinds."""

    def test_links_each_kind_separately(self):
        app = make_package(
            "app", "1.0.0",
            dependencies={"lib-a": "^1.0.0"},
            dev_dependencies={"lib-b": "1.0.0"},
            optional_dependencies={"lib-c": "~2.0.0"},
        )
        lib_a = make_package("lib-a", "1.2.0")
        lib_b = make_package("lib-b", "1.0.0")
        lib_c = make_package("lib-c", "2.0.3")

        nodes = DependencyGraphBuilder().build([lib_a, lib_b, lib_c, app])
        node_a, node_b, node_c, node_app = nodes

        assert [n.package for n in nodes] == [lib_a, lib_b, lib_c, app]
        assert node_app.dependencies == [node_a]
        assert node_app.dev_dependencies == [node_b]
        assert node_app.optional_dependencies == [node_c]
        assert node_a.dependencies == []

    def test_cycles_share_nodes(self):
        lib_a = make_package("lib-a", "1.0.0", dependencies={"lib-b": "1.0.0"})
        lib_b = make_package("lib-b", "1.0.0", dependencies={"lib-a": "1.0.0"})

        node_a, node_b = DependencyGraphBuilder().build([lib_a, lib_b])

        assert node_a.dependencies[0] is node_b
        assert node_b.dependencies[0] is node_a

    def test_self_reference_is_allowed(self):
        lib_a = make_package("lib-a", "1.0.0", dependencies={"lib-a": "^1.0.0"})

        (node_a,) = DependencyGraphBuilder().build([lib_a])

        assert node_a.dependencies == [node_a]

    def test_base_packages_are_not_modified(self):
        lib_a = make_package("lib-a", "1.0.0", dependencies={"lib-b": "1.0.0"})
        lib_b = make_package("lib-b", "1.0.0")

        DependencyGraphBuilder().build([lib_a, lib_b])

        assert lib_a.dependencies == {"lib-b": "1.0.0"}
        assert not hasattr(lib_a, "package_dependencies")

    def test_repeated_build_creates_fresh_nodes(self):
        lib_a = make_package("lib-a", "1.0.0", dependencies={"lib-b": "1.0.0"})
        lib_b = make_package("lib-b", "1.0.0")
        builder = DependencyGraphBuilder()

        first = builder.build([lib_a, lib_b])
        second = builder.build([lib_a, lib_b])

        assert second[0] is not first[0]
        assert second[1] is not first[1]
        assert first[0].dependencies == [first[1]]
        assert second[0].dependencies == [second[1]]


class TestRemoveUnreferenced:
    """Tests for pruning nodes nobody references."""

    def test_root_survives_without_references(self):
        root = DependencyNode(package=make_package("app", "1.0.0"))
        orphan = DependencyNode(package=make_package("orphan", "1.0.0"))

        assert remove_unreferenced([orphan, root], root) == [root]

    def test_referenced_nodes_survive_in_input_order(self):
        lib_b = DependencyNode(package=make_package("lib-b", "1.0.0"))
        lib_a = DependencyNode(package=make_package("lib-a", "1.0.0"), dependencies=[lib_b])
        root = DependencyNode(package=make_package("app", "1.0.0"), dev_dependencies=[lib_a])

        assert remove_unreferenced([lib_b, lib_a, root], root) == [lib_b, lib_a, root]

    def test_self_reference_alone_does_not_keep_a_node(self):
        root = DependencyNode(package=make_package("app", "1.0.0"))
        loop = DependencyNode(package=make_package("loop", "1.0.0"))
        loop.dependencies.append(loop)

        assert remove_unreferenced([loop, root], root) == [root]

    def test_mutually_referencing_cluster_survives(self):
        """Nodes referenced only by each other are kept even though the root never reaches them."""
        root = DependencyNode(package=make_package("app", "1.0.0"))
        x = DependencyNode(package=make_package("x", "1.0.0"))
        y = DependencyNode(package=make_package("y", "1.0.0"), optional_dependencies=[x])
        x.dependencies.append(y)

        assert remove_unreferenced([x, y, root], root) == [x, y, root]

    def test_single_pass_keeps_node_referenced_by_pruned_node(self):
        root = DependencyNode(package=make_package("app", "1.0.0"))
        leaf = DependencyNode(package=make_package("leaf", "1.0.0"))
        orphan = DependencyNode(package=make_package("orphan", "1.0.0"), dependencies=[leaf])

        assert remove_unreferenced([orphan, leaf, root], root) == [leaf, root]

    def test_without_root(self):
        leaf = DependencyNode(package=make_package("leaf", "1.0.0"))
        parent = DependencyNode(package=make_package("parent", "1.0.0"), dependencies=[leaf])

        assert remove_unreferenced([parent, leaf], None) == [leaf]
