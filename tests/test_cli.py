"""Tests for the command line interface."""

import json
import subprocess

import pytest
from typer.testing import CliRunner

from githooks.__version__ import __version__
from githooks.cli import app
from githooks.core.ledger import compute_checksum

from conftest import write_hook


runner = CliRunner()


def git_config(repo, *args):
    completed = subprocess.run(["git", "config"] + list(args), cwd=repo, capture_output=True, text=True)
    return completed.stdout.strip() if completed.returncode == 0 else None


@pytest.fixture
def project(temp_git_repo, monkeypatch):
    """Repositório git real com um hook local, como diretório atual."""
    monkeypatch.chdir(temp_git_repo)
    write_hook(temp_git_repo / ".githooks" / "pre-commit" / "lint")
    return temp_git_repo


# =============================================================================
# Geral
# =============================================================================

def test_version_option():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"Githooks versão {__version__}" in result.output


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_command():
    result = runner.invoke(app, ["help"])

    assert result.exit_code == 0
    assert "disable" in result.output
    assert "shared" in result.output


def test_trailing_help_shows_command_help(project):
    result = runner.invoke(app, ["enable", "pre-commit", "help"])

    assert result.exit_code == 0
    assert "Reativa hooks desativados" in result.output


def test_unknown_command_fails():
    result = runner.invoke(app, ["frobnicate"])

    assert result.exit_code != 0


def test_outside_repository_fails(tmp_path, monkeypatch):
    outside = tmp_path / "outside"
    outside.mkdir()
    monkeypatch.chdir(outside)

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 1
    assert "repositório Git" in result.output


# =============================================================================
# accept / disable / enable / list
# =============================================================================

def test_accept_disable_enable_cycle(project):
    hook = (project / ".githooks" / "pre-commit" / "lint").resolve()
    ledger = project / ".git" / ".githooks.checksum"

    result = runner.invoke(app, ["accept", "pre-commit", "lint"])
    assert result.exit_code == 0
    assert f"{compute_checksum(hook)} {hook}" in ledger.read_text()

    result = runner.invoke(app, ["list", "pre-commit"])
    assert "  - lint (active)" in result.output

    result = runner.invoke(app, ["disable", "pre-commit", "lint"])
    assert result.exit_code == 0
    assert f"disabled> {hook}" in ledger.read_text()
    assert "lint (disabled)" in runner.invoke(app, ["list", "pre-commit"]).output

    result = runner.invoke(app, ["enable", "lint"])
    assert result.exit_code == 0
    assert "disabled>" not in ledger.read_text()
    assert "lint (active)" in runner.invoke(app, ["list", "pre-commit"]).output


def test_accept_unknown_hook(project):
    result = runner.invoke(app, ["accept", "does-not-exist"])

    assert result.exit_code == 1
    assert "não foi possível encontrar hooks" in result.output


def test_list_all_triggers_and_json(project):
    write_hook(project / ".githooks" / "pre-push")

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "> pre-commit" in result.output
    assert "  - pre-push (file / pending / new)" in result.output
    assert "> post-merge" not in result.output

    data = json.loads(runner.invoke(app, ["list", "--format", "json", "pre-commit"]).output)
    assert data[0]["hooks"][0]["name"] == "lint"


def test_list_requested_trigger_without_hooks(project):
    result = runner.invoke(app, ["list", "post-checkout"])

    assert "> post-checkout" in result.output
    assert "Nenhum hook ativo encontrado" in result.output


def test_list_unknown_format(project):
    assert runner.invoke(app, ["list", "--format", "xml"]).exit_code == 1


def test_disable_all_and_reset(project):
    result = runner.invoke(app, ["disable", "--all"])
    assert result.exit_code == 0
    assert git_config(project, "--local", "githooks.disable") == "y"

    result = runner.invoke(app, ["disable", "--reset"])
    assert result.exit_code == 0
    assert git_config(project, "--local", "githooks.disable") is None


# =============================================================================
# trust / readme / shared / update
# =============================================================================

def test_trust_subcommands(project):
    marker = project / ".githooks" / "trust-all"

    assert runner.invoke(app, ["trust"]).exit_code == 0
    assert marker.is_file()
    assert git_config(project, "--local", "githooks.trust.all") == "Y"
    assert "(active / trusted)" in runner.invoke(app, ["list", "pre-commit"]).output

    assert runner.invoke(app, ["trust", "revoke"]).exit_code == 0
    assert git_config(project, "--local", "githooks.trust.all") == "N"

    assert runner.invoke(app, ["trust", "forget"]).exit_code == 0
    assert git_config(project, "--local", "githooks.trust.all") is None

    assert runner.invoke(app, ["trust", "delete"]).exit_code == 0
    assert not marker.exists()

    assert runner.invoke(app, ["trust", "sideways"]).exit_code == 1


def test_readme(project):
    readme = project / ".githooks" / "README.md"

    assert runner.invoke(app, ["readme"]).exit_code == 0
    assert readme.is_file()

    result = runner.invoke(app, ["readme", "add"])
    assert result.exit_code == 1
    assert "git hooks readme update" in result.output

    readme.write_text("antigo\n")
    assert runner.invoke(app, ["readme", "update"]).exit_code == 0
    assert readme.read_text() != "antigo\n"


def test_shared_add_and_list(project):
    result = runner.invoke(app, ["shared", "add", "https://example.com/a.git"])
    assert result.exit_code == 0
    assert git_config(project, "--global", "githooks.shared") == "https://example.com/a.git"

    result = runner.invoke(app, ["shared", "add", "--local", "git@example.com:team/hooks.git"])
    assert result.exit_code == 0
    assert "git@example.com:team/hooks.git" in (project / ".githooks" / ".shared").read_text()

    result = runner.invoke(app, ["shared", "list"])
    assert "  - https://example.com/a.git (não sincronizado)" in result.output
    assert "  - git@example.com:team/hooks.git (não sincronizado)" in result.output

    assert runner.invoke(app, ["shared", "remove", "https://example.com/a.git"]).exit_code == 0
    assert git_config(project, "--global", "githooks.shared") is None
    assert runner.invoke(app, ["shared", "remove", "https://example.com/a.git"]).exit_code == 1


def test_pull_without_shared_repositories(project):
    result = runner.invoke(app, ["pull"])

    assert result.exit_code == 0
    assert "Nenhum repositório compartilhado" in result.output


def test_update_enable_disable(project):
    assert runner.invoke(app, ["update", "enable"]).exit_code == 0
    assert git_config(project, "--global", "githooks.autoupdate.enabled") == "Y"

    assert runner.invoke(app, ["update", "disable"]).exit_code == 0
    assert git_config(project, "--global", "githooks.autoupdate.enabled") == "N"


# =============================================================================
# run (chamado pelo template)
# =============================================================================

def test_run_executes_accepted_hooks(project, monkeypatch):
    monkeypatch.setenv("GITHOOKS_AUTO_ACCEPT", "1")
    write_hook(project / ".githooks" / "pre-commit" / "lint", "#!/bin/sh\ntouch lint-ran\n")

    result = runner.invoke(app, ["run", str(project / ".git" / "hooks" / "pre-commit"), "extra"])

    assert result.exit_code == 0
    assert (project / "lint-ran").exists()


def test_run_propagates_failure(project, monkeypatch):
    monkeypatch.setenv("GITHOOKS_AUTO_ACCEPT", "1")
    write_hook(project / ".githooks" / "pre-commit" / "lint", "#!/bin/sh\nexit 5\n")

    result = runner.invoke(app, ["run", str(project / ".git" / "hooks" / "pre-commit")])

    assert result.exit_code == 1


def test_run_declines_new_hooks_without_auto_accept(project):
    write_hook(project / ".githooks" / "pre-commit" / "lint", "#!/bin/sh\ntouch lint-ran\n")

    result = runner.invoke(app, ["run", str(project / ".git" / "hooks" / "pre-commit")])

    assert result.exit_code == 0
    assert not (project / "lint-ran").exists()
    assert "Novo arquivo de hook encontrado" in result.output
