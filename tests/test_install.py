"""Tests for the installer and the decision providers."""

import io

import pytest
from rich.console import Console

import githooks.hooks.install as install_module
from githooks.core.config_store import (
    ConfigScope,
    KEY_ALIAS,
    KEY_AUTOUPDATE_ENABLED,
    KEY_PREVIOUS_SEARCHDIR,
    KEY_SINGLE_INSTALL,
)
from githooks.core.models import Decision, HookFile
from githooks.hooks.install import (
    HookInstaller,
    InstallError,
    InstallOptions,
    is_githooks_template,
    print_install_summary,
    render_template,
    write_readme,
)
from githooks.prompts.decisions import NonInteractiveDecisionProvider, TerminalDecisionProvider
from githooks.update.checker import read_version

from conftest import ScriptedDecider, output_of, write_hook


@pytest.fixture(autouse=True)
def no_system_templates(tmp_path, monkeypatch):
    monkeypatch.setattr(install_module, "DEFAULT_TEMPLATES_HOOKS_DIR", tmp_path / "missing-system-templates")


@pytest.fixture
def installer(settings, config_store, console):
    return HookInstaller(
        settings,
        config_store,
        decider=ScriptedDecider(confirm_answer=False),
        console=console,
        environ={},
        python="/usr/bin/python3",
    )


# =============================================================================
# Template
# =============================================================================

def test_template_carries_marker_and_version():
    content = render_template(version="2610.191200", python="/opt/py/bin/python")

    assert content.startswith("#!/bin/sh\n")
    assert read_version(content) == "2610.191200"
    assert '"${GITHOOKS_PYTHON:-/opt/py/bin/python}" -m githooks run "$0" "$@"' in content


def test_foreign_hook_is_preserved(tmp_path, installer):
    hooks = tmp_path / "hooks"
    foreign = write_hook(hooks / "pre-commit", "#!/bin/sh\necho meu hook\n")

    assert installer.write_hook(foreign)

    assert (hooks / "pre-commit.replaced.githook").read_text() == "#!/bin/sh\necho meu hook\n"
    assert is_githooks_template(hooks / "pre-commit")
    assert (hooks / "pre-commit").stat().st_mode & 0o111


def test_existing_template_is_overwritten_without_backup(tmp_path, installer):
    hooks = tmp_path / "hooks"
    write_hook(hooks / "pre-commit", render_template(version="1"))

    installer.write_hook(hooks / "pre-commit")

    assert not (hooks / "pre-commit.replaced.githook").exists()


# =============================================================================
# Template directory
# =============================================================================

def test_template_dir_from_environment(tmp_path, settings, config_store, console):
    (tmp_path / "tpl" / "hooks").mkdir(parents=True)
    installer = HookInstaller(settings, config_store, console=console, environ={"GIT_TEMPLATE_DIR": str(tmp_path / "tpl")})

    assert installer.find_template_dir() == tmp_path / "tpl" / "hooks"


def test_template_dir_from_git_config(tmp_path, installer, config_store):
    (tmp_path / "cfg" / "hooks").mkdir(parents=True)
    config_store.set("init.templateDir", str(tmp_path / "cfg"), ConfigScope.GLOBAL)

    assert installer.find_template_dir() == tmp_path / "cfg" / "hooks"


def test_missing_template_dir_is_an_error(installer):
    with pytest.raises(InstallError):
        installer.find_template_dir()


def test_install_templates_writes_every_managed_hook(tmp_path, installer, settings):
    template_dir = tmp_path / "tpl"
    template_dir.mkdir()

    written = installer.install_templates(template_dir)

    assert [p.name for p in written] == settings.managed_hooks
    assert all(is_githooks_template(p) for p in written)


# =============================================================================
# Repositories
# =============================================================================

def test_install_into_repo(temp_git_repo, installer, settings):
    assert installer.install_into_repo(temp_git_repo, offer_readme=False)

    for trigger in settings.managed_hooks:
        assert is_githooks_template(temp_git_repo / ".git" / "hooks" / trigger)


def test_install_into_non_repository(tmp_path, installer, console):
    assert not installer.install_into_repo(tmp_path)
    assert "não é um repositório Git" in output_of(console)


def test_readme_offer_is_asked_once(tmp_path, settings, config_store, console):
    decider = ScriptedDecider(confirm_answer=True)
    installer = HookInstaller(settings, config_store, decider=decider, console=console, environ={})
    first, second = tmp_path / "one", tmp_path / "two"

    installer.offer_readme(first)
    installer.offer_readme(second)

    assert (first / ".githooks" / "README.md").is_file()
    assert (second / ".githooks" / "README.md").is_file()


def test_write_readme_respects_existing_file(repo):
    readme = repo / ".githooks" / "README.md"
    readme.write_text("meu readme\n")

    assert not write_readme(repo)
    assert readme.read_text() == "meu readme\n"
    assert write_readme(repo, replace=True)
    assert "Githooks" in readme.read_text()


def test_find_repositories(tmp_path, installer):
    (tmp_path / "src" / "b" / ".git").mkdir(parents=True)
    (tmp_path / "src" / "a" / ".git").mkdir(parents=True)
    (tmp_path / "src" / "plain").mkdir()

    assert installer.find_repositories(tmp_path / "src") == [tmp_path / "src" / "a", tmp_path / "src" / "b"]


def test_dry_run_changes_nothing(tmp_path, installer, config_store):
    (tmp_path / "tpl" / "hooks").mkdir(parents=True)
    installer.environ = {"GIT_TEMPLATE_DIR": str(tmp_path / "tpl")}
    (tmp_path / "src" / "a" / ".git" / "hooks").mkdir(parents=True)

    report = installer.install(InstallOptions(dry_run=True, non_interactive=True, search_dir=tmp_path / "src"))

    assert report.templates == []
    assert list((tmp_path / "tpl" / "hooks").iterdir()) == []
    assert list((tmp_path / "src" / "a" / ".git" / "hooks").iterdir()) == []
    assert config_store.get(KEY_ALIAS, ConfigScope.GLOBAL) is None
    assert config_store.get(KEY_PREVIOUS_SEARCHDIR, ConfigScope.GLOBAL) is None


def test_full_install(tmp_path, installer, config_store, settings):
    (tmp_path / "tpl" / "hooks").mkdir(parents=True)
    installer.environ = {"GIT_TEMPLATE_DIR": str(tmp_path / "tpl")}
    (tmp_path / "src" / "a" / ".git").mkdir(parents=True)

    report = installer.install(InstallOptions(non_interactive=True, search_dir=tmp_path / "src"))

    assert report.success
    assert len(report.templates) == len(settings.managed_hooks)
    assert report.repositories == [tmp_path / "src" / "a"]
    assert config_store.get(KEY_ALIAS, ConfigScope.GLOBAL) == "!/usr/bin/python3 -m githooks"
    assert config_store.get(KEY_AUTOUPDATE_ENABLED, ConfigScope.GLOBAL) == "Y"
    assert config_store.get(KEY_PREVIOUS_SEARCHDIR, ConfigScope.GLOBAL) == str(tmp_path / "src")


def test_single_install(temp_git_repo, installer, config_store, console):
    report = installer.install(InstallOptions(single=True, non_interactive=True), cwd=temp_git_repo)

    assert report.template_dir is None
    assert report.repositories == [temp_git_repo]
    assert config_store.get(KEY_SINGLE_INSTALL, ConfigScope.LOCAL) == "yes"
    assert config_store.get(KEY_AUTOUPDATE_ENABLED, ConfigScope.LOCAL) == "Y"

    print_install_summary(report, console)
    assert "Instalação do Githooks" in output_of(console)


def test_single_install_outside_repository(tmp_path, installer):
    with pytest.raises(InstallError):
        installer.install(InstallOptions(single=True), cwd=tmp_path)


def test_declined_auto_update_is_not_enabled(temp_git_repo, installer, config_store, console):
    installer.install(InstallOptions(single=True), cwd=temp_git_repo)

    assert config_store.get(KEY_AUTOUPDATE_ENABLED) is None
    assert "githooks.autoupdate.enabled Y" in output_of(console)


# =============================================================================
# Decision providers
# =============================================================================

def _terminal(tmp_path, answers):
    tty = tmp_path / "tty"
    tty.write_text(answers)
    console = Console(file=io.StringIO(), width=300)
    return TerminalDecisionProvider(console=console, tty_path=str(tty))


@pytest.mark.parametrize("answer,expected", [
    ("\n", Decision.YES),
    ("y\n", Decision.YES),
    ("a\n", Decision.ALL),
    ("N\n", Decision.NO),
    ("d\n", Decision.DISABLE),
])
def test_terminal_hook_answers(tmp_path, answer, expected):
    hook = HookFile(path=tmp_path / "lint", trigger="pre-commit")

    assert _terminal(tmp_path, answer).accept_hook(hook, changed=False) == expected


def test_terminal_trust_defaults_to_no(tmp_path):
    assert _terminal(tmp_path, "\n").trust_repository(tmp_path) is False
    assert _terminal(tmp_path, "y\n").trust_repository(tmp_path) is True


def test_terminal_without_tty_falls_back(tmp_path):
    provider = TerminalDecisionProvider(
        console=Console(file=io.StringIO()),
        tty_path=str(tmp_path / "missing"),
        fallback=NonInteractiveDecisionProvider(auto_accept=True),
    )
    hook = HookFile(path=tmp_path / "lint", trigger="pre-commit")

    assert provider.accept_hook(hook, changed=True) == Decision.YES
    assert provider.trust_repository(tmp_path) is None
    assert provider.confirm("?", default=True) is True
