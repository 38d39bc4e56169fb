"""Tests for delegating member dependency declarations to the workspace."""

from __future__ import annotations

import tomllib

import pytest

from easydep.document import parse
from easydep.errors import MalformedDeclaration, SchemaError
from easydep.rewriters import MemberRewriter

HEADER = """\
# Crate a
[package]
edition = "2021"   # unusual order on purpose
name = "a"
version = "0.1.0"

"""

FOOTER = """\

[features]
# features keep their order
zeta = []
alpha = ["bar/x"]
"""

MEMBER = (
    HEADER
    + """\
[dependencies]
foo = "1.0"
bar = { version = "2.0", features = ["x"] }
sibling = { path = "../sibling" }
untouched = "3"
"""
    + FOOTER
)


def _rewrite(text: str, common: dict[str, str]):
    doc = parse(text)
    modified = MemberRewriter().apply(doc, common)
    out = doc.serialize()
    return modified, out, tomllib.loads(out)


# ── Variant scenario ─────────────────────────────────────────────────────


class TestScenario:
    def test_version_string_and_inline(self):
        modified, out, data = _rewrite(MEMBER, {"foo": "1.0", "bar": "2.0"})
        assert modified
        deps = data["dependencies"]
        assert deps["foo"] == {"workspace": True}
        assert deps["bar"] == {"features": ["x"], "workspace": True}
        assert "foo = { workspace = true }" in out
        assert 'bar = { features = ["x"], workspace = true }\n' in out

    def test_unrelated_regions_byte_identical(self):
        _, out, _ = _rewrite(MEMBER, {"foo": "1.0", "bar": "2.0"})
        assert out.startswith(HEADER + "[dependencies]\n")
        assert out.endswith(FOOTER)
        assert 'sibling = { path = "../sibling" }\n' in out
        assert 'untouched = "3"\n' in out

    def test_non_common_names_untouched(self):
        modified, out, _ = _rewrite(MEMBER, {"serde": "1.0"})
        assert not modified
        assert out == MEMBER

    def test_local_path_entry_untouched_even_if_common(self):
        modified, out, data = _rewrite(MEMBER, {"sibling": "1.0"})
        assert not modified
        assert out == MEMBER
        assert data["dependencies"]["sibling"] == {"path": "../sibling"}


# ── Idempotence & markers ────────────────────────────────────────────────


class TestIdempotence:
    def test_second_pass_changes_nothing(self):
        doc = parse(MEMBER)
        rewriter = MemberRewriter()
        common = {"foo": "1.0", "bar": "2.0"}
        assert rewriter.apply(doc, common)
        first = doc.serialize()
        assert not rewriter.apply(doc, common)
        assert doc.serialize() == first

    def test_already_delegated(self):
        text = "[dependencies]\nfoo = { workspace = true, optional = true }\n"
        modified, out, _ = _rewrite(text, {"foo": "1.0"})
        assert not modified
        assert out == text

    def test_false_marker_flipped(self):
        text = '[dependencies]\nfoo = { workspace = false, features = ["a"] }\n'
        modified, _, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dependencies"]["foo"] == {"workspace": True, "features": ["a"]}

    def test_stale_version_next_to_marker_removed(self):
        text = '[dependencies]\nfoo = { version = "1", workspace = true }\n'
        modified, _, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dependencies"]["foo"] == {"workspace": True}


# ── Sections and variants ────────────────────────────────────────────────


class TestSections:
    def test_dev_and_build_dependencies(self):
        text = (
            '[dev-dependencies]\nfoo = "1.0"\n\n'
            '[build-dependencies]\nfoo = { version = "1.0", default-features = false }\n'
        )
        modified, _, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dev-dependencies"]["foo"] == {"workspace": True}
        assert data["build-dependencies"]["foo"] == {
            "default-features": False,
            "workspace": True,
        }

    def test_block_variant(self):
        text = (
            '[dependencies.foo]\nversion = "1.0"\nfeatures = ["derive"]\n'
            "optional = true\n"
        )
        modified, _, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dependencies"]["foo"] == {
            "features": ["derive"],
            "optional": True,
            "workspace": True,
        }

    def test_target_specific_tables(self):
        text = (
            "[target.'cfg(unix)'.dependencies]\n"
            'libc = "0.2"\n'
            "\n"
            "[target.'cfg(windows)'.dev-dependencies]\n"
            'libc = { version = "0.2", package = "libc" }\n'
        )
        modified, _, data = _rewrite(text, {"libc": "0.2"})
        assert modified
        target = data["target"]
        assert target["cfg(unix)"]["dependencies"]["libc"] == {"workspace": True}
        assert target["cfg(windows)"]["dev-dependencies"]["libc"] == {
            "package": "libc",
            "workspace": True,
        }

    def test_target_tables_split_by_other_sections(self):
        text = (
            "[target.'cfg(unix)'.dependencies]\n"
            'libc = "0.2"\n'
            "\n"
            "[features]\n"
            "x = []\n"
            "\n"
            "[target.'cfg(windows)'.dependencies]\n"
            'libc = "0.2"\n'
        )
        modified, _, data = _rewrite(text, {"libc": "0.2"})
        assert modified
        for cfg in ("cfg(unix)", "cfg(windows)"):
            assert data["target"][cfg]["dependencies"]["libc"] == {"workspace": True}
        assert data["features"] == {"x": []}

    def test_target_list_elements_each_rewritten(self):
        text = (
            "[dependencies]\n\n"
            '[[dependencies.foo]]\nversion = "1.0"\nfeatures = ["a"]\n\n'
            "[[dependencies.foo]]\nworkspace = true\n"
        )
        modified, _, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dependencies"]["foo"] == [
            {"features": ["a"], "workspace": True},
            {"workspace": True},
        ]

    def test_dotted_keys_rewritten(self):
        text = (
            "[dependencies]\n"
            'foo.version = "1.0"\n'
            'foo.features = ["a"]\n'
            "foo.optional = true\n"
        )
        modified, out, data = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert data["dependencies"]["foo"] == {
            "features": ["a"],
            "optional": True,
            "workspace": True,
        }
        assert "foo.version" not in out

    def test_inline_spacing_and_comment_kept(self):
        text = '[dependencies]\nfoo = {version="1.0",optional=true}  # shared\n'
        modified, out, _ = _rewrite(text, {"foo": "1.0"})
        assert modified
        assert out == (
            "[dependencies]\nfoo = { optional = true, workspace = true }  # shared\n"
        )

    def test_no_dependency_sections(self):
        text = '[package]\nname = "a"\n'
        modified, out, _ = _rewrite(text, {"foo": "1.0"})
        assert not modified
        assert out == text


# ── Errors ───────────────────────────────────────────────────────────────


class TestErrors:
    @pytest.mark.parametrize(
        "text,key",
        [
            ('dependencies = "oops"\n', "dependencies"),
            ("dev-dependencies = 1\n", "dev-dependencies"),
            ('target = "unix"\n', "target"),
            ("[target]\nunix = 1\n", "target.unix"),
            ("[target.unix]\ndependencies = []\n", "target.unix.dependencies"),
        ],
    )
    def test_non_table_sections(self, text, key):
        with pytest.raises(SchemaError) as exc:
            MemberRewriter().apply(parse(text), {"foo": "1.0"})
        assert exc.value.key == key

    def test_malformed_declaration_propagates(self):
        with pytest.raises(MalformedDeclaration) as exc:
            MemberRewriter().apply(parse("[dependencies]\nfoo = 1\n"), {"foo": "1.0"})
        assert exc.value.name == "foo"

    def test_malformed_non_common_entry_ignored(self):
        text = "[dependencies]\nfoo = 1\n"
        assert not MemberRewriter().apply(parse(text), {"bar": "1.0"})
