from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catls.settings import ENV_FIELDS, ENV_PREFIX

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """root/a.txt ("hello\\n") and root/sub/b.go ("package x\\n")."""
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"hello\n")
    (root / "sub" / "b.go").write_bytes(b"package x\n")
    return root


@pytest.fixture
def deep_tree(sample_tree: Path) -> Path:
    """sample_tree plus sub/deep/c.md, logs/x.log and an empty directory."""
    (sample_tree / "sub" / "deep").mkdir()
    (sample_tree / "sub" / "deep" / "c.md").write_text("# title\nbody\n", encoding="utf-8")
    (sample_tree / "logs").mkdir()
    (sample_tree / "logs" / "x.log").write_text("line\n", encoding="utf-8")
    (sample_tree / "empty").mkdir()
    return sample_tree


@pytest.fixture(autouse=True)
def _clear_catls_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_FIELDS:
        monkeypatch.delenv(ENV_PREFIX + name.upper(), raising=False)
