"""Tests for snapshots: RepoRef parsing, git fetching, and the assembler."""

import shutil
import subprocess
from pathlib import Path

import pytest
from pydantic import ValidationError

from repodiagram.errors import FetchError
from repodiagram.snapshot.assembler import SnapshotAssembler
from repodiagram.snapshot.git import ensure_snapshot, fetch_diff, get_workdir_path, remote_url
from repodiagram.snapshot.models import ConcatOptions, RepoRef

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# ---------------------------------------------------------------------------
# RepoRef
# ---------------------------------------------------------------------------


class TestRepoRef:
    def test_parse_owner_repo(self):
        ref = RepoRef.parse("acme/widget-api")
        assert (ref.owner, ref.repo, ref.ref) == ("acme", "widget-api", "main")

    def test_parse_url_strips_git_suffix(self):
        ref = RepoRef.parse("https://github.com/acme/widget-api.git", ref="v1.2.0")
        assert ref.repo == "widget-api"
        assert ref.ref == "v1.2.0"

    def test_parse_url_with_path(self):
        ref = RepoRef.parse("https://github.com/acme/widget-api/tree/main/src")
        assert ref.full_name == "acme/widget-api"

    @pytest.mark.parametrize("bad", ["widget-api", "a/b/c", "", "owner/"])
    def test_parse_rejects_bad_identifiers(self, bad):
        with pytest.raises(ValueError, match="Invalid repo identifier"):
            RepoRef.parse(bad)

    def test_empty_ref_rejected(self):
        with pytest.raises(ValidationError):
            RepoRef(owner="acme", repo="widget-api", ref="")

    def test_str(self, sample_ref):
        assert str(sample_ref) == "acme/widget-api@main"

    def test_frozen(self, sample_ref):
        with pytest.raises(ValidationError):
            sample_ref.ref = "dev"


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


class TestWorkdirPath:
    def test_layout(self, sample_ref, tmp_path):
        assert get_workdir_path(sample_ref, tmp_path) == tmp_path / "acme" / "widget-api" / "main"

    def test_distinct_refs_distinct_paths(self, tmp_path):
        a = RepoRef(owner="acme", repo="widget-api", ref="main")
        b = RepoRef(owner="acme", repo="widget-api", ref="dev")
        assert get_workdir_path(a, tmp_path) != get_workdir_path(b, tmp_path)

    def test_remote_url(self, sample_ref):
        assert remote_url(sample_ref) == "https://github.com/acme/widget-api.git"
        assert remote_url(sample_ref, "https://git.example.com/") == (
            "https://git.example.com/acme/widget-api.git"
        )


# ---------------------------------------------------------------------------
# ensure_snapshot / fetch_diff against a local remote
# ---------------------------------------------------------------------------


@requires_git
class TestEnsureSnapshot:
    async def test_materializes_checkout(self, sample_ref, git_remote):
        result = await ensure_snapshot(sample_ref, git_remote)
        workdir = Path(result.workdir)
        assert workdir == get_workdir_path(sample_ref, git_remote.cache_dir)
        assert (workdir / "README.md").read_text() == "# Widget API\n"
        assert len(result.commit_sha) == 40

    async def test_idempotent(self, sample_ref, git_remote):
        first = await ensure_snapshot(sample_ref, git_remote)
        second = await ensure_snapshot(sample_ref, git_remote)
        assert first == second

    async def test_other_ref_other_workdir(self, git_remote):
        feature = RepoRef(owner="acme", repo="widget-api", ref="feature")
        result = await ensure_snapshot(feature, git_remote)
        assert result.workdir.endswith("feature")
        assert (Path(result.workdir) / "src" / "worker.py").exists()

    async def test_unknown_ref_raises_fetch_error(self, git_remote):
        missing = RepoRef(owner="acme", repo="widget-api", ref="no-such-branch")
        with pytest.raises(FetchError) as exc_info:
            await ensure_snapshot(missing, git_remote)
        assert "fetch" in exc_info.value.command
        assert exc_info.value.returncode != 0

    async def test_fetch_diff(self, sample_ref, git_remote):
        diff = await fetch_diff(sample_ref, "feature", git_remote)
        assert "src/worker.py" in diff
        assert "+def work():" in diff

    async def test_fetch_diff_same_ref_empty(self, sample_ref, git_remote):
        assert await fetch_diff(sample_ref, "main", git_remote) == ""

    async def test_fetch_diff_non_utf8_content(self, sample_ref, git_remote):
        remote = Path(git_remote.remote_base_url.removeprefix("file://")) / "acme" / "widget-api.git"
        git = ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com"]
        subprocess.run([*git, "checkout", "--quiet", "-b", "latin1"], cwd=remote, check=True)
        (remote / "menu.txt").write_bytes(b"caf\xe9\n")
        subprocess.run([*git, "add", "-A"], cwd=remote, check=True)
        subprocess.run([*git, "commit", "--quiet", "-m", "menu"], cwd=remote, check=True)
        subprocess.run([*git, "checkout", "--quiet", "main"], cwd=remote, check=True)

        diff = await fetch_diff(sample_ref, "latin1", git_remote)
        assert "menu.txt" in diff
        assert "+caf\ufffd" in diff


@requires_git
class TestSnapshotAssembler:
    async def test_directory_tree(self, sample_ref, git_remote):
        tree = await SnapshotAssembler(git_remote).directory_tree(sample_ref)
        assert tree.splitlines() == [
            "├── src",
            "│   └── app.py",
            "├── .gitignore",
            "└── README.md",
        ]

    async def test_concatenate(self, sample_ref, git_remote):
        corpus = await SnapshotAssembler(git_remote).concatenate(sample_ref)
        assert corpus.startswith("===== /.gitignore =====\n*.log\n")
        assert "===== /src/app.py =====\ndef main():\n    return 1\n" in corpus
        assert "/.git/" not in corpus

    async def test_iter_corpus_matches_concatenate(self, sample_ref, git_remote):
        assembler = SnapshotAssembler(git_remote)
        chunks = [chunk async for chunk in assembler.iter_corpus(sample_ref)]
        assert "".join(chunks) == await assembler.concatenate(sample_ref)
        assert len(chunks) == 3

    async def test_options_override_config(self, sample_ref, git_remote):
        assembler = SnapshotAssembler(git_remote)
        options = ConcatOptions(extra_ignore_globs=["src/"])
        corpus = await assembler.concatenate(sample_ref, options)
        assert "/src/app.py" not in corpus
