"""Tests for manifest parsing and discovery."""

import pytest

import tests.fixtures.manifest_pkg as manifest_pkg
from subdivision import (
    InvalidManifestError,
    PathDeclaration,
    Subdivision,
    discover_manifests,
    parse_manifest,
    read_manifest_modules,
)


class TestParseManifest:
    def test_parses_groupings(self) -> None:
        result = parse_manifest(
            [
                {"path": "Web/Routes", "addins": [{"type": "Route"}]},
                {"path": "Empty"},
            ],
            source="example",
        )
        assert result == (
            PathDeclaration(path="Web/Routes", addins=({"type": "Route"},), source="example"),
            PathDeclaration(path="Empty", addins=(), source="example"),
        )

    def test_paths_must_be_a_sequence(self) -> None:
        with pytest.raises(InvalidManifestError, match="must be a sequence"):
            parse_manifest({"path": "Web/Routes"})

    def test_string_is_not_a_sequence_of_paths(self) -> None:
        with pytest.raises(InvalidManifestError, match="must be a sequence"):
            parse_manifest("Web/Routes")

    def test_entry_must_be_a_mapping(self) -> None:
        with pytest.raises(InvalidManifestError, match="must be a mapping"):
            parse_manifest(["Web/Routes"])

    def test_path_is_required(self) -> None:
        with pytest.raises(InvalidManifestError, match="non-empty string"):
            parse_manifest([{"addins": []}])

    def test_addins_must_be_a_sequence(self) -> None:
        with pytest.raises(InvalidManifestError, match="Addins of 'P'"):
            parse_manifest([{"path": "P", "addins": {"type": "Route"}}])


class TestReadManifestModules:
    def test_discovers_nested_manifests_in_sorted_order(self) -> None:
        declarations = read_manifest_modules(manifest_pkg)

        assert [(declaration.source, declaration.path) for declaration in declarations] == [
            ("tests.fixtures.manifest_pkg.alpha.manifest", "Shared/Items"),
            ("tests.fixtures.manifest_pkg.beta.nested.manifest", "Shared/Items"),
            ("tests.fixtures.manifest_pkg.beta.nested.manifest", "Beta/Only"),
        ]

    def test_accepts_package_name(self) -> None:
        assert read_manifest_modules("tests.fixtures.manifest_pkg") == read_manifest_modules(
            manifest_pkg
        )

    def test_module_without_paths(self) -> None:
        with pytest.raises(InvalidManifestError, match="has no 'paths'"):
            read_manifest_modules("tests.fixtures.broken_manifest_pkg")

    def test_not_a_package(self) -> None:
        with pytest.raises(InvalidManifestError, match="is not a package"):
            read_manifest_modules("tests.fixtures.manifest_pkg.alpha.manifest")

    @pytest.mark.asyncio
    async def test_discovered_addins_compose_across_modules(self) -> None:
        engine = Subdivision()
        await engine.start(discover_manifests(manifest_pkg))
        engine.add_builder("Item", lambda addin: addin["label"])

        assert engine.build("Shared/Items") == ("beta-early", "alpha-first", "beta-after-first")
        assert engine.build("Beta/Only") == ()
        addins = engine.get_addins("Shared/Items")
        assert addins[1].source == "tests.fixtures.manifest_pkg.alpha.manifest"
