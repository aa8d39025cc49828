"""Tests for the filesystem note store.

Each test runs against a fresh temporary vault directory.
"""

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from notevault.vault import (
    InvalidPathError,
    MaterializationError,
    NoteNotFoundError,
    NoteOperation,
    Vault,
)
from notevault.vault.models import EPOCH

# =============================================================================
# Initialization & Path Safety Tests
# =============================================================================


class TestInitialization:
    """Tests for vault root validation."""

    def test_missing_root(self, tmp_path: Path) -> None:
        """Test that a missing root fails immediately."""
        with pytest.raises(InvalidPathError, match="does not exist"):
            Vault(root=tmp_path / "missing")

    def test_root_is_file(self, tmp_path: Path) -> None:
        """Test that a file root fails immediately."""
        file = tmp_path / "file.md"
        file.write_text("x")

        with pytest.raises(InvalidPathError, match="not a directory"):
            Vault(root=file)

    def test_root_is_resolved(self, vault_path: Path) -> None:
        """Test that the root is stored as an absolute resolved path."""
        vault = Vault(root=vault_path / "." / "sub" / "..")

        assert vault.root == vault_path.resolve()


class TestPathSafety:
    """Tests for rejecting paths outside the vault."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "../secret.md",
            "../../etc/passwd.md",
            "notes/../../secret.md",
            "/etc/passwd.md",
            "..",
            "a\x00b.md",
        ],
    )
    async def test_traversal_rejected(self, vault: Vault, path: str) -> None:
        """Test that escaping or malformed paths raise InvalidPathError."""
        with pytest.raises(InvalidPathError):
            await vault.read(path)

    @pytest.mark.asyncio
    async def test_traversal_rejected_before_filesystem_access(
        self, vault: Vault, vault_path: Path
    ) -> None:
        """Test that a traversal write creates nothing outside the vault."""
        with pytest.raises(InvalidPathError):
            await vault.write("../outside/escape.md", "nope")

        assert not (vault_path.parent / "outside").exists()

    @pytest.mark.asyncio
    async def test_inner_dotdot_is_normalized(self, vault: Vault) -> None:
        """Test that '..' staying inside the vault is allowed and normalized."""
        note = await vault.write("a/../b.md", "inside")

        assert note.path == "b.md"

    @pytest.mark.asyncio
    async def test_symlink_escape_rejected(self, vault: Vault, tmp_path: Path) -> None:
        """Test that symlinks pointing outside the vault are rejected."""
        outside = tmp_path / "outside.md"
        outside.write_text("secret")
        os.symlink(outside, vault.root / "link.md")

        with pytest.raises(InvalidPathError):
            await vault.read("link.md")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["", "   "])
    async def test_empty_path_rejected(self, vault: Vault, path: str) -> None:
        """Test that missing paths are rejected."""
        with pytest.raises(InvalidPathError):
            await vault.read(path)

    @pytest.mark.asyncio
    async def test_non_note_path_rejected(self, vault: Vault) -> None:
        """Test that paths without the .md extension are rejected."""
        with pytest.raises(InvalidPathError):
            await vault.write("notes/data.json", "{}")


# =============================================================================
# Materialization Tests
# =============================================================================


class TestMaterialize:
    """Tests for reading files into notes."""

    @pytest.mark.asyncio
    async def test_fields(self, vault: Vault, vault_path: Path) -> None:
        """Test every derived field of a materialized note."""
        (vault_path / "Projects").mkdir()
        (vault_path / "Projects" / "API Design.md").write_text(
            "---\ntags: [api]\nstatus: draft\n---\nDesign for #backend\n", encoding="utf-8"
        )

        note = await vault.materialize("Projects/API Design.md")

        assert note.path == "Projects/API Design.md"
        assert note.name == "API Design"
        assert note.content == "Design for #backend\n"
        assert note.metadata == {"tags": ["api"], "status": "draft"}
        assert set(note.tags) == {"api", "backend"}
        assert note.created.tzinfo is not None
        assert note.modified > EPOCH

    @pytest.mark.asyncio
    async def test_timestamps_from_filesystem(self, vault: Vault, vault_path: Path) -> None:
        """Test that modified comes from the file's mtime."""
        file = vault_path / "old.md"
        file.write_text("old")
        os.utime(file, (1_700_000_000, 1_700_000_000))

        note = await vault.materialize("old.md")

        assert note.modified == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    @pytest.mark.asyncio
    async def test_missing_note(self, vault: Vault) -> None:
        """Test that a missing file raises NoteNotFoundError."""
        with pytest.raises(NoteNotFoundError):
            await vault.materialize("missing.md")

    @pytest.mark.asyncio
    async def test_directory_is_not_a_note(self, vault: Vault, vault_path: Path) -> None:
        """Test that a directory named like a note is not found."""
        (vault_path / "folder.md").mkdir()

        with pytest.raises(NoteNotFoundError):
            await vault.materialize("folder.md")

    @pytest.mark.asyncio
    async def test_undecodable_file(self, vault: Vault, vault_path: Path) -> None:
        """Test that non-UTF-8 files raise MaterializationError."""
        (vault_path / "binary.md").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(MaterializationError):
            await vault.read("binary.md")


class TestListAll:
    """Tests for enumerating the vault."""

    @pytest.mark.asyncio
    async def test_lists_notes_recursively(self, vault: Vault, sample_vault: Path) -> None:
        """Test that notes in subfolders are found in path order."""
        notes = await vault.list_all()

        assert [n.path for n in notes] == [
            "Personal/Shopping.md",
            "Work/Planning.md",
            "Work/Standup.md",
        ]

    @pytest.mark.asyncio
    async def test_skips_control_directories(self, vault: Vault, vault_path: Path) -> None:
        """Test that .git and node_modules are never scanned."""
        (vault_path / ".git").mkdir()
        (vault_path / ".git" / "HEAD.md").write_text("ref")
        (vault_path / "lib" / "node_modules" / "pkg").mkdir(parents=True)
        (vault_path / "lib" / "node_modules" / "pkg" / "README.md").write_text("readme")
        (vault_path / "note.md").write_text("kept")

        notes = await vault.list_all()

        assert [n.path for n in notes] == ["note.md"]

    @pytest.mark.asyncio
    async def test_ignores_other_extensions(self, vault: Vault, vault_path: Path) -> None:
        """Test that only .md files are notes."""
        (vault_path / "image.png").write_bytes(b"png")
        (vault_path / "note.md").write_text("kept")

        assert [n.path for n in await vault.list_all()] == ["note.md"]

    @pytest.mark.asyncio
    async def test_broken_note_is_skipped(self, vault: Vault, vault_path: Path) -> None:
        """Test that one unreadable note does not break enumeration."""
        (vault_path / "bad.md").write_text("---\nkey: [unclosed\n---\nBody")
        (vault_path / "good.md").write_text("fine")

        notes = await vault.list_all()

        assert [n.path for n in notes] == ["good.md"]

    @pytest.mark.asyncio
    async def test_limit(self, vault: Vault, sample_vault: Path) -> None:
        """Test that limit truncates the listing."""
        assert len(await vault.list_all(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_empty_vault(self, vault: Vault) -> None:
        """Test listing an empty vault."""
        assert await vault.list_all() == []


# =============================================================================
# Read / Write / Update / Delete Tests
# =============================================================================


class TestWrite:
    """Tests for creating and overwriting notes."""

    @pytest.mark.asyncio
    async def test_round_trip(self, vault: Vault) -> None:
        """Test that written content and metadata are read back exactly."""
        metadata = {"title": "Plan", "priority": 1, "done": False, "ratio": 0.25, "owner": None}
        content = "# Plan\n\nSteps:\n- one\n"

        await vault.write("plan.md", content, metadata)
        note = await vault.read("plan.md")

        assert note.content == content
        assert note.metadata == metadata

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["line one\r\nline two\r\n", "a\rb", "mixed\r\nand\n"])
    async def test_round_trip_preserves_line_endings(self, vault: Vault, content: str) -> None:
        """Test that CRLF and CR line endings are read back unchanged."""
        await vault.write("endings.md", content, {"title": "x"})
        note = await vault.read("endings.md")

        assert note.content == content
        assert note.metadata == {"title": "x"}

    @pytest.mark.asyncio
    async def test_crlf_frontmatter_is_parsed(self, vault: Vault, vault_path: Path) -> None:
        """Test that a frontmatter block written with CRLF delimiters is recognized."""
        (vault_path / "win.md").write_bytes(b"---\r\ntitle: Win\r\n---\r\nBody\r\n")

        note = await vault.read("win.md")

        assert note.metadata == {"title": "Win"}
        assert note.content == "Body\r\n"

    @pytest.mark.asyncio
    async def test_without_metadata_writes_raw(self, vault: Vault, vault_path: Path) -> None:
        """Test that notes without metadata have no frontmatter block."""
        await vault.write("raw.md", "Just text")

        assert (vault_path / "raw.md").read_text() == "Just text"

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, vault: Vault, vault_path: Path) -> None:
        """Test that intermediate folders are created."""
        note = await vault.write("a/b/c/deep.md", "deep")

        assert (vault_path / "a" / "b" / "c" / "deep.md").exists()
        assert note.name == "deep"

    @pytest.mark.asyncio
    async def test_overwrites(self, vault: Vault) -> None:
        """Test that write replaces an existing note unconditionally."""
        await vault.write("note.md", "first", {"v": 1})
        note = await vault.write("note.md", "second")

        assert note.content == "second"
        assert note.metadata == {}

    @pytest.mark.asyncio
    async def test_returns_stored_note(self, vault: Vault) -> None:
        """Test that the returned note reflects disk state, including tags."""
        note = await vault.write("tagged.md", "About #python", {"tags": ["code"]})

        assert set(note.tags) == {"code", "python"}
        assert note.modified > EPOCH


class TestUpdate:
    """Tests for updating existing notes."""

    @pytest.mark.asyncio
    async def test_merges_metadata(self, vault: Vault) -> None:
        """Test that metadata keys are merged, not replaced."""
        await vault.write("note.md", "body", {"status": "draft", "owner": "sam"})

        note = await vault.update("note.md", metadata={"status": "final", "reviewed": True})

        assert note.metadata == {"status": "final", "owner": "sam", "reviewed": True}
        assert note.content == "body"

    @pytest.mark.asyncio
    async def test_replaces_content_keeps_metadata(self, vault: Vault) -> None:
        """Test that content-only updates keep existing metadata."""
        await vault.write("note.md", "old", {"status": "draft"})

        note = await vault.update("note.md", content="new")

        assert note.content == "new"
        assert note.metadata == {"status": "draft"}

    @pytest.mark.asyncio
    async def test_missing_note(self, vault: Vault, vault_path: Path) -> None:
        """Test that updating a missing note raises and creates nothing."""
        with pytest.raises(NoteNotFoundError):
            await vault.update("missing.md", content="x")

        assert not (vault_path / "missing.md").exists()


class TestDelete:
    """Tests for deleting notes."""

    @pytest.mark.asyncio
    async def test_delete_then_read(self, vault: Vault) -> None:
        """Test that a deleted note can no longer be read."""
        await vault.write("gone.md", "bye")

        await vault.delete("gone.md")

        with pytest.raises(NoteNotFoundError):
            await vault.read("gone.md")

    @pytest.mark.asyncio
    async def test_missing_note(self, vault: Vault) -> None:
        """Test that deleting a missing note raises NoteNotFoundError."""
        with pytest.raises(NoteNotFoundError):
            await vault.delete("missing.md")


class TestReadMany:
    """Tests for concurrent multi-note reads."""

    @pytest.mark.asyncio
    async def test_keeps_requested_order(self, vault: Vault, sample_vault: Path) -> None:
        """Test that results follow the order of the requested paths."""
        notes = await vault.read_many(["Work/Standup.md", "Personal/Shopping.md"])

        assert [n.name for n in notes] == ["Standup", "Shopping"]

    @pytest.mark.asyncio
    async def test_missing_note_raises(self, vault: Vault, sample_vault: Path) -> None:
        """Test that any missing path fails the whole read."""
        with pytest.raises(NoteNotFoundError):
            await vault.read_many(["Work/Standup.md", "nope.md"])


# =============================================================================
# Stats Tests
# =============================================================================


class TestStats:
    """Tests for vault statistics."""

    @pytest.mark.asyncio
    async def test_empty_vault(self, vault: Vault) -> None:
        """Test that an empty vault reports zeros and the epoch."""
        stats = await vault.stats()

        assert stats.total_notes == 0
        assert stats.total_size == 0
        assert stats.last_modified == EPOCH

    @pytest.mark.asyncio
    async def test_counts_content_characters(self, vault: Vault, vault_path: Path) -> None:
        """Test that size counts body characters, not bytes or frontmatter."""
        (vault_path / "a.md").write_text("---\nk: v\n---\nhéllo", encoding="utf-8")
        (vault_path / "b.md").write_text("abc", encoding="utf-8")

        stats = await vault.stats()

        assert stats.total_notes == 2
        assert stats.total_size == 8

    @pytest.mark.asyncio
    async def test_last_modified_is_latest(self, vault: Vault, vault_path: Path) -> None:
        """Test that last_modified is the newest note's mtime."""
        for name, mtime in (("a.md", 1_600_000_000), ("b.md", 1_700_000_000)):
            (vault_path / name).write_text(name)
            os.utime(vault_path / name, (mtime, mtime))

        stats = await vault.stats()

        assert stats.last_modified == datetime.fromtimestamp(1_700_000_000, tz=UTC)


# =============================================================================
# Bulk Operation Tests
# =============================================================================


class TestBulkOperation:
    """Tests for ordered batches with per-item failures."""

    @pytest.mark.asyncio
    async def test_partial_failure(self, vault: Vault) -> None:
        """Test that one failure is reported without stopping the batch."""
        result = await vault.bulk_operation(
            [
                NoteOperation(type="create", path="one.md", content="1"),
                NoteOperation(type="delete", path="missing.md"),
                NoteOperation(type="create", path="two.md", content="2"),
            ]
        )

        assert result.processed == 3
        assert result.success is False
        assert len(result.errors) == 1
        assert result.errors[0].path == "missing.md"
        assert "not found" in result.errors[0].error.lower()
        assert (vault.root / "two.md").exists()

    @pytest.mark.asyncio
    async def test_all_succeed(self, vault: Vault) -> None:
        """Test a clean batch."""
        result = await vault.bulk_operation(
            [
                NoteOperation(type="create", path="a.md", content="a", metadata={"k": 1}),
                NoteOperation(type="read", path="a.md"),
            ]
        )

        assert result.success is True
        assert result.processed == 2
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_sequential_effects(self, vault: Vault) -> None:
        """Test that later operations observe earlier ones on the same path."""
        result = await vault.bulk_operation(
            [
                NoteOperation(type="create", path="temp.md", content="x"),
                NoteOperation(type="delete", path="temp.md"),
                NoteOperation(type="read", path="temp.md"),
            ]
        )

        assert result.processed == 3
        assert [e.path for e in result.errors] == ["temp.md"]

    @pytest.mark.asyncio
    async def test_update_writes_content(self, vault: Vault) -> None:
        """Test that batch updates write the given content, empty if omitted."""
        await vault.write("note.md", "original")

        await vault.bulk_operation([NoteOperation(type="update", path="note.md")])

        assert (await vault.read("note.md")).content == ""

    @pytest.mark.asyncio
    async def test_invalid_path_collected(self, vault: Vault) -> None:
        """Test that traversal attempts are reported, not raised."""
        result = await vault.bulk_operation(
            [NoteOperation(type="create", path="../escape.md", content="x")]
        )

        assert result.success is False
        assert result.errors[0].path == "../escape.md"
