"""Shared test fixtures for repodiagram."""

import shutil
import subprocess

import pytest
from unittest.mock import AsyncMock, MagicMock

from repodiagram.config.models import RepoDiagramConfig, SnapshotConfig, SynthesisConfig
from repodiagram.llm.base import LLMProvider
from repodiagram.llm.models import LLMConfig
from repodiagram.llm.responses import FlatResponse
from repodiagram.snapshot.models import RepoRef
from repodiagram.synthesis.validators import DiagramValidator

MERMAID_REPLY = """\
Here is the final diagram.

```mermaid
graph TD
  A["CLI"] --> B["Snapshot Assembler"]
```

Legend: boxes are components.
"""


def flat(text: str, response_id: str = "resp_1") -> FlatResponse:
    return FlatResponse(id=response_id, status="completed", output_text=text)


@pytest.fixture
def sample_ref():
    return RepoRef(owner="acme", repo="widget-api", ref="main")


@pytest.fixture
def sample_config():
    return RepoDiagramConfig()


@pytest.fixture
def mock_llm_provider():
    """Provider whose every reply is a valid Mermaid answer."""
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(provider="openai", model="test-model")
    provider.respond = AsyncMock(return_value=flat(MERMAID_REPLY))
    return provider


@pytest.fixture
def fake_fetcher():
    return AsyncMock(return_value="===== /README.md =====\n# Widget API\n")


@pytest.fixture
def accepting_validator():
    validator = MagicMock(spec=DiagramValidator)
    validator.validate = AsyncMock(return_value=None)
    return validator


@pytest.fixture
def synthesis_config():
    return SynthesisConfig(language="mermaid", max_attempts=3)


@pytest.fixture
def sample_tree(tmp_path):
    """A small repository layout with nested ignore files."""
    root = tmp_path / "repo"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "node_modules" / "left-pad").mkdir(parents=True)
    (root / "README.md").write_text("# Widget API\n")
    (root / "main.py").write_text("print('hi')\n")
    (root / "src" / "app.py").write_text("import pkg\n")
    (root / "src" / "pkg" / "__init__.py").write_text("")
    (root / "docs" / "guide.md").write_text("Guide")
    (root / "node_modules" / "left-pad" / "index.js").write_text("module.exports = 1;\n")
    return root


# ---------------------------------------------------------------------------
# Local git remote for fetcher tests
# ---------------------------------------------------------------------------

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_remote(tmp_path):
    """A non-bare repo at <tmp>/remotes/acme/widget-api.git with main and feature branches.

    Returns a SnapshotConfig whose remote_base_url points at it over file://.
    """
    remotes = tmp_path / "remotes"
    repo = remotes / "acme" / "widget-api.git"
    repo.mkdir(parents=True)
    _git(repo, "init", "--quiet", "-b", "main")
    (repo / "README.md").write_text("# Widget API\n")
    (repo / ".gitignore").write_text("*.log\n")
    (repo / "src").mkdir()
    (repo / "src" / "app.py").write_text("def main():\n    return 1\n")
    _git(repo, "add", "-A")
    _git(repo, "commit", "--quiet", "-m", "initial")

    _git(repo, "checkout", "--quiet", "-b", "feature")
    (repo / "src" / "worker.py").write_text("def work():\n    return 2\n")
    _git(repo, "add", "-A")
    _git(repo, "commit", "--quiet", "-m", "add worker")
    _git(repo, "checkout", "--quiet", "main")

    return SnapshotConfig(
        remote_base_url=f"file://{remotes}",
        cache_dir=str(tmp_path / "cache"),
    )
