# ABOUTME: Tests for package.yaml decoding and rendering.
# ABOUTME: Verifies hpack documents render into parseable .cabal text.

from pathlib import Path

import pytest

from devsession.descriptions.hpack import HpackDecodeError, decode_hpack, render_cabal
from devsession.parsers import build_info, parse_package_description, simplify_cond_tree


def _write(tmp_path: Path, text: str, directory: str = "pkg") -> Path:
    package_dir = tmp_path / directory
    package_dir.mkdir()
    path = package_dir / "package.yaml"
    path.write_text(text)
    return path


def _library_info(text: str):
    result = parse_package_description(text)
    assert result.ok, result.errors
    return build_info(simplify_cond_tree(result.description.library))


class TestDecodeHpack:
    """Tests for decode_hpack."""

    def test_decode_scalars_as_lists(self, tmp_path: Path) -> None:
        """Single values are accepted where hpack allows lists."""
        path = _write(tmp_path, "name: pkg\nlibrary:\n  source-dirs: src\n  default-extensions: CPP\n")

        package = decode_hpack(path)

        assert package.name == "pkg"
        assert package.version == "0.0.0"
        assert package.library.source_dirs == ["src"]
        assert package.library.default_extensions == ["CPP"]

    def test_name_defaults_to_directory(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "library: {}\n", directory="widgets")

        package = decode_hpack(path)

        assert package.name == "widgets"

    def test_numeric_version_coerced(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\nversion: 0.1\n")

        assert decode_hpack(path).version == "0.1"

    def test_dependency_mapping(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\ndependencies:\n  base: '>= 4 && < 5'\n  text:\n")

        package = decode_hpack(path)

        assert package.dependencies == ["base >= 4 && < 5", "text"]

    def test_empty_library_key_declares_library(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\nlibrary:\n")

        assert decode_hpack(path).library is not None

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: [unclosed\n")

        with pytest.raises(HpackDecodeError):
            decode_hpack(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "- just\n- a list\n")

        with pytest.raises(HpackDecodeError, match="mapping"):
            decode_hpack(path)

    def test_schema_violation(self, tmp_path: Path) -> None:
        """A conditional without a condition fails validation."""
        path = _write(tmp_path, "name: pkg\nlibrary:\n  when:\n    source-dirs: extra\n")

        with pytest.raises(HpackDecodeError):
            decode_hpack(path)

    def test_mapping_where_list_expected(self, tmp_path: Path) -> None:
        """Source dirs must be strings, not mappings."""
        path = _write(tmp_path, "name: pkg\nlibrary:\n  source-dirs: {a: b}\n")

        with pytest.raises(HpackDecodeError, match="expected a string"):
            decode_hpack(path)

    def test_nested_list_item_rejected(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\ndefault-extensions: [[CPP]]\n")

        with pytest.raises(HpackDecodeError):
            decode_hpack(path)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "")
        path.write_bytes(b"name: caf\xe9\n")

        with pytest.raises(HpackDecodeError, match="utf-8"):
            decode_hpack(path)


class TestRenderCabal:
    """Tests for render_cabal."""

    def test_common_fields_merged_into_library(self, tmp_path: Path) -> None:
        """Top-level fields come before the library's own."""
        path = _write(
            tmp_path,
            "name: pkg\n"
            "default-extensions: [OverloadedStrings]\n"
            "source-dirs: shared\n"
            "library:\n"
            "  source-dirs: [src, \"gen dir\"]\n"
            "  default-extensions: LambdaCase\n",
        )

        info = _library_info(render_cabal(decode_hpack(path)))

        assert info.hs_source_dirs == ["shared", "src", "gen dir"]
        assert info.default_extensions == ["OverloadedStrings", "LambdaCase"]

    def test_no_library_renders_no_library_stanza(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\nexecutables:\n  app:\n    source-dirs: app\n")

        result = parse_package_description(render_cabal(decode_hpack(path)))

        assert result.ok
        assert result.description.library is None
        assert result.description.components[0].name == "app"

    def test_when_inline_and_then_else(self, tmp_path: Path) -> None:
        """Both conditional forms render as if blocks."""
        path = _write(
            tmp_path,
            "name: pkg\n"
            "library:\n"
            "  source-dirs: src\n"
            "  when:\n"
            "    - condition: os(windows)\n"
            "      source-dirs: win\n"
            "    - condition: flag(dev)\n"
            "      then:\n"
            "        default-extensions: CPP\n"
            "      else:\n"
            "        default-extensions: Strict\n",
        )

        text = render_cabal(decode_hpack(path))
        result = parse_package_description(text)

        assert result.ok
        branches = result.description.library.branches
        assert [b.condition for b in branches] == ["os(windows)", "flag(dev)"]
        assert branches[1].else_tree.fields["default-extensions"] == ["Strict"]
        info = _library_info(text)
        assert info.hs_source_dirs == ["src", "win"]
        assert info.default_extensions == ["CPP"]

    def test_rendered_header(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name: pkg\nversion: 1.2.3\nlibrary: {}\n")

        text = render_cabal(decode_hpack(path))

        assert text.startswith("cabal-version: 1.12\nname: pkg\nversion: 1.2.3\n")
        assert "\nlibrary\n" in text
