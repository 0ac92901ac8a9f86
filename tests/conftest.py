"""Pytest configuration and fixtures."""

import io
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from rich.console import Console

from githooks.core.config_store import MemoryConfigStore
from githooks.core.engine import HookExecutionEngine
from githooks.core.ignore import IgnoreFilter
from githooks.core.ledger import ChecksumLedger
from githooks.core.models import Decision
from githooks.core.resolver import HookResolver
from githooks.core.settings_loader import load_default_settings
from githooks.core.trust import TrustEvaluator
from githooks.prompts.decisions import DecisionProvider
from githooks.shared.sync import SharedRepoRegistry


# =============================================================================
# Ambiente isolado
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """HOME e git config global apontando para tmp_path; nunca pergunta nada."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GITHOOKS_NON_INTERACTIVE", "1")
    for name in ("GITHOOKS_DISABLE", "GITHOOKS_AUTO_ACCEPT", "GITHOOKS_SETTINGS", "GIT_TEMPLATE_DIR", "GITHOOKS_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def temp_git_repo(tmp_path):
    """Cria repositório git temporário."""
    repo_dir = tmp_path / "test_repo"
    repo_dir.mkdir()

    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=repo_dir,
        check=True
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=repo_dir,
        check=True
    )

    return repo_dir


@pytest.fixture
def repo(tmp_path):
    """Repositório falso (apenas .git/hooks), suficiente para o engine."""
    root = tmp_path / "repo"
    (root / ".git" / "hooks").mkdir(parents=True)
    (root / ".githooks").mkdir()
    return root


def write_hook(path: Path, content: str = "#!/bin/sh\nexit 0\n", executable: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if executable:
        path.chmod(0o755)
    return path


# =============================================================================
# Componentes
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    settings = load_default_settings()
    settings.paths.shared_cache_dir = str(tmp_path / "shared")
    settings.paths.install_dir = str(tmp_path / "install")
    return settings


@pytest.fixture
def config_store():
    return MemoryConfigStore()


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=300, highlight=False)


def output_of(console: Console) -> str:
    return console.file.getvalue()


class ScriptedDecider(DecisionProvider):
    """Responde com uma lista pré-definida e registra as perguntas."""

    interactive = True

    def __init__(
        self,
        answers: Optional[List[Decision]] = None,
        trust_answer: Optional[bool] = None,
        install_answer: bool = False,
        confirm_answer: bool = True,
    ):
        self.answers = list(answers or [])
        self.trust_answer = trust_answer
        self.install_answer = install_answer
        self.confirm_answer = confirm_answer
        self.asked: List[Path] = []
        self.trust_asked = 0

    def accept_hook(self, hook, changed):
        self.asked.append(hook.path)
        return self.answers.pop(0) if self.answers else Decision.NO

    def trust_repository(self, repo_root):
        self.trust_asked += 1
        return self.trust_answer

    def install_update(self, version):
        return self.install_answer

    def confirm(self, question, default=False):
        return self.confirm_answer


@pytest.fixture
def decider():
    return ScriptedDecider()


class RecordingRunner:
    """Substitui a execução real dos hooks."""

    def __init__(self, exit_codes: Optional[Dict[str, int]] = None):
        self.exit_codes = exit_codes or {}
        self.calls: List[List[str]] = []

    def __call__(self, cmd, cwd):
        self.calls.append(list(cmd))
        hook = cmd[1] if cmd[0] == "sh" else cmd[0]
        return self.exit_codes.get(Path(hook).name, 0)

    @property
    def executed(self) -> List[str]:
        return [Path(c[1] if c[0] == "sh" else c[0]).name for c in self.calls]


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def make_engine(repo, settings, config_store, decider, console, runner):
    """Monta um HookExecutionEngine para o repositório falso."""

    def factory(**overrides):
        hook_root = repo / ".githooks"
        params = dict(
            repo_root=repo,
            settings=settings,
            config=config_store,
            ledger=ChecksumLedger(repo / ".git" / ".githooks.checksum"),
            trust=TrustEvaluator(hook_root / "trust-all", config_store, overrides.get("decider", decider)),
            ignore_filter=IgnoreFilter([hook_root]),
            resolver=HookResolver(repo),
            decider=decider,
            registry=SharedRepoRegistry(config_store, repo_root=repo),
            console=console,
            runner=runner,
            environ={},
        )
        params.update(overrides)
        return HookExecutionEngine(**params)

    return factory
