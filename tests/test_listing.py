"""Tests for directory listings."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from mdgrow.content.listing import build_listing, is_decodable, join_relative, parent_link
from mdgrow.errors import IoFailure
from mdgrow.models import EntryKind


class TestParentLink:
    """Tests for parent_link helper."""

    def test_root_has_no_parent(self) -> None:
        assert parent_link("") is None

    def test_top_level_parent_is_root(self) -> None:
        assert parent_link("docs") == ""

    def test_nested_parent(self) -> None:
        assert parent_link("docs/guide/setup") == "docs/guide"


class TestJoinRelative:
    def test_join_at_root(self) -> None:
        assert join_relative("", "a.md") == "a.md"

    def test_join_nested(self) -> None:
        assert join_relative("docs", "a.md") == "docs/a.md"


class TestBuildListing:
    """Tests for build_listing."""

    def test_lexicographic_order(self, tmp_path: Path) -> None:
        """Entries ``b.txt, a.md, c`` list as ``a.md, b.txt, c``."""
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a.md").write_text("# a")
        (tmp_path / "c").mkdir()

        listing = build_listing(tmp_path, "")

        assert [entry.name for entry in listing.entries] == ["a.md", "b.txt", "c"]

    def test_directories_interleaved_with_files(self, tmp_path: Path) -> None:
        """Directories are not grouped before files."""
        (tmp_path / "zeta").mkdir()
        (tmp_path / "alpha.txt").write_text("a")
        (tmp_path / "beta").mkdir()

        listing = build_listing(tmp_path, "")

        assert [entry.name for entry in listing.entries] == ["alpha.txt", "beta", "zeta"]

    def test_codepoint_order(self, tmp_path: Path) -> None:
        """Upper case sorts before lower case regardless of locale."""
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "B.md").write_text("B")
        (tmp_path / "a.md").write_text("a")

        names = [entry.name for entry in build_listing(tmp_path, "").entries]

        if len(names) == 3:
            assert names == ["B.md", "a.md", "b.md"]

    def test_classification(self, tmp_path: Path) -> None:
        (tmp_path / "docs").mkdir()
        (tmp_path / "readme.md").write_text("# r")
        (tmp_path / "notes.mkd").write_text("# n")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        kinds = {entry.name: entry.kind for entry in build_listing(tmp_path, "").entries}

        assert kinds == {
            "docs": EntryKind.DIRECTORY,
            "image.png": EntryKind.FILE,
            "notes.mkd": EntryKind.MARKDOWN,
            "readme.md": EntryKind.MARKDOWN,
        }

    def test_links_and_parent(self, tmp_path: Path) -> None:
        """Links join the listing path with the entry name."""
        (tmp_path / "setup.md").write_text("# s")

        listing = build_listing(tmp_path, "docs/guide")

        assert listing.parent_link == "docs"
        assert listing.entries[0].relative_link == "docs/guide/setup.md"

    def test_root_listing_has_no_parent(self, tmp_path: Path) -> None:
        listing = build_listing(tmp_path, "")

        assert listing.parent_link is None
        assert listing.entries == []

    def test_symlinked_directory_is_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "target"
        target.mkdir()
        (tmp_path / "link").symlink_to(target, target_is_directory=True)

        kinds = {entry.name: entry.kind for entry in build_listing(tmp_path, "").entries}

        assert kinds["link"] is EntryKind.DIRECTORY

    def test_links_never_leave_root(self, tmp_path: Path) -> None:
        """No entry name is a traversal segment."""
        (tmp_path / "..hidden").write_text("x")
        (tmp_path / "docs").mkdir()

        listing = build_listing(tmp_path, "")

        for entry in listing.entries:
            assert entry.name not in {".", ".."}
            assert "/" not in entry.name

    @pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
    def test_undecodable_names_skipped(self, tmp_path: Path) -> None:
        """Names that are not valid UTF-8 are left out."""
        (tmp_path / "ok.md").write_text("# ok")
        try:
            with open(os.path.join(os.fsencode(tmp_path), b"bad\xff.md"), "wb") as handle:
                handle.write(b"x")
        except OSError:
            pytest.skip("filesystem rejects undecodable names")

        listing = build_listing(tmp_path, "")

        assert [entry.name for entry in listing.entries] == ["ok.md"]

    def test_missing_directory_is_io_failure(self, tmp_path: Path) -> None:
        with pytest.raises(IoFailure):
            build_listing(tmp_path / "missing", "missing")

    def test_read_error_is_io_failure(self, tmp_path: Path) -> None:
        """No partial listing is returned on error."""
        with patch("mdgrow.content.listing.os.scandir", side_effect=PermissionError("denied")):
            with pytest.raises(IoFailure) as excinfo:
                build_listing(tmp_path, "")

        assert "denied" not in excinfo.value.detail


class TestIsDecodable:
    def test_plain_name(self) -> None:
        assert is_decodable("readme.md")

    def test_surrogate_escaped_name(self) -> None:
        assert not is_decodable(os.fsdecode(b"bad\xff"))
