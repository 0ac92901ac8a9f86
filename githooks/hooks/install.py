"""
GITHOOKS - Git Hooks Installer
Instala o template base dos hooks (diretório de templates do git e
repositórios existentes), o alias `git hooks` e as atualizações automáticas.
"""

import logging
import os
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from rich.console import Console
from rich.table import Table

from ..__version__ import __version__
from ..config import README_TEMPLATE_FILE
from ..core.config_store import (
    ConfigScope,
    ConfigStore,
    KEY_ALIAS,
    KEY_AUTOUPDATE_ENABLED,
    KEY_PREVIOUS_SEARCHDIR,
    KEY_SINGLE_INSTALL,
    KEY_TEMPLATE_DIR,
)
from ..core.formatters import emit
from ..core.models import GithooksSettings, LEGACY_HOOK_SUFFIX
from ..git.client import find_hooks_dir
from ..prompts.decisions import DecisionProvider, NonInteractiveDecisionProvider


logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class InstallError(Exception):
    """Exception raised when installation cannot proceed."""
    pass


# =============================================================================
# Hook Template
# =============================================================================

TEMPLATE_MARKER = "Githooks base hook template"
DEFAULT_TEMPLATES_HOOKS_DIR = Path("/usr/share/git-core/templates/hooks")

BASE_TEMPLATE = """#!/bin/sh
# {marker}
#
# Executa os hooks da pasta .githooks do repositório (e dos repositórios
# compartilhados) para o trigger do git que chamou este arquivo.
#
# Version: {version}

exec "${{GITHOOKS_PYTHON:-{python}}}" -m githooks run "$0" "$@"
"""


def render_template(version: str = __version__, python: Optional[str] = None) -> str:
    """Conteúdo do hook instalado em cada trigger gerenciado."""
    return BASE_TEMPLATE.format(
        marker=TEMPLATE_MARKER,
        version=version,
        python=python or sys.executable or "python3",
    )


def is_githooks_template(path: Path) -> bool:
    """True se o arquivo já é um template do Githooks (não precisa ser preservado)."""
    try:
        return TEMPLATE_MARKER in Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def write_readme(repo_root: Path, hooks_dir: str = ".githooks", replace: bool = False) -> bool:
    """
    Copia o README do pacote para .githooks/README.md.

    Returns:
        False se já existia um README e replace=False
    """
    target = Path(repo_root) / hooks_dir / "README.md"
    if target.exists() and not replace:
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(README_TEMPLATE_FILE.read_text(encoding="utf-8"), encoding="utf-8")
    return True


# =============================================================================
# Options / Report
# =============================================================================

@dataclass
class InstallOptions:
    """Flags da linha de comando do instalador."""
    dry_run: bool = False
    non_interactive: bool = False
    single: bool = False
    search_dir: Optional[Path] = None


@dataclass
class InstallReport:
    """O que foi (ou seria, em dry-run) instalado."""
    template_dir: Optional[Path] = None
    templates: List[Path] = field(default_factory=list)
    repositories: List[Path] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


# =============================================================================
# Hook Installer Class
# =============================================================================

class HookInstaller:
    """Instala o Githooks (templates, repositórios, alias, atualizações)."""

    def __init__(
        self,
        settings: GithooksSettings,
        config: ConfigStore,
        decider: Optional[DecisionProvider] = None,
        console: Optional[Console] = None,
        environ: Optional[Mapping[str, str]] = None,
        python: Optional[str] = None,
    ):
        self.settings = settings
        self.config = config
        self.decider = decider or NonInteractiveDecisionProvider()
        self.console = console or Console(highlight=False)
        self.environ = os.environ if environ is None else environ
        self.python = python or sys.executable or "python3"
        self.template = render_template(python=self.python)
        self._readme_answer: Optional[bool] = None

    # =========================================================================
    # Templates
    # =========================================================================

    def template_dir_candidates(self) -> List[Path]:
        """$GIT_TEMPLATE_DIR/hooks, init.templateDir/hooks e o padrão do sistema."""
        candidates = []
        env_dir = self.environ.get("GIT_TEMPLATE_DIR")
        if env_dir:
            candidates.append(Path(env_dir).expanduser() / "hooks")
        config_dir = self.config.get(KEY_TEMPLATE_DIR)
        if config_dir:
            candidates.append(Path(config_dir).expanduser() / "hooks")
        candidates.append(DEFAULT_TEMPLATES_HOOKS_DIR)
        return candidates

    def find_template_dir(self) -> Path:
        """
        Primeiro diretório de templates com permissão de escrita.

        Raises:
            InstallError: Se nenhum for encontrado
        """
        for candidate in self.template_dir_candidates():
            if candidate.is_dir() and os.access(candidate, os.W_OK):
                return candidate
            logger.debug("Diretório de templates ignorado: %s", candidate)

        raise InstallError("Diretório de templates de hooks do Git não encontrado")

    def write_hook(self, target: Path) -> bool:
        """
        Escreve o template em `target`, preservando um hook estranho como
        <nome>.replaced.githook para que continue sendo executado.
        """
        if target.is_file() and not is_githooks_template(target):
            emit(self.console, f"Salvando hook existente: {target.name}")
            try:
                target.replace(target.with_name(target.name + LEGACY_HOOK_SUFFIX))
            except OSError as e:
                emit(self.console, f"! Falha ao salvar o hook existente em {target}: {e}")
                return False

        try:
            target.write_text(self.template, encoding="utf-8")
            target.chmod(0o755)
        except OSError as e:
            emit(self.console, f"! Falha ao instalar {target}: {e}")
            return False
        return True

    def install_templates(self, template_dir: Path, dry_run: bool = False) -> List[Path]:
        if dry_run:
            emit(self.console, f"[Dry run] Instalaria os templates de hooks em {template_dir}")
            return []

        written = []
        for trigger in self.settings.managed_hooks:
            target = template_dir / trigger
            if not self.write_hook(target):
                raise InstallError(f"Falha ao preparar o template {trigger} em {target}")
            emit(self.console, f"Template de hook pronto: {target}")
            written.append(target)
        return written

    # =========================================================================
    # Repositórios
    # =========================================================================

    def install_into_repo(self, repo_root: Path, dry_run: bool = False, offer_readme: bool = True) -> bool:
        """Instala o template em cada hook gerenciado de .git/hooks."""
        repo_root = Path(repo_root)
        hooks_dir = find_hooks_dir(repo_root, create=not dry_run)
        if hooks_dir is None:
            emit(self.console, f"! {repo_root} não é um repositório Git")
            return False

        success = True
        if not dry_run:
            for trigger in self.settings.managed_hooks:
                success = self.write_hook(hooks_dir / trigger) and success

        if offer_readme and not dry_run:
            self.offer_readme(repo_root)

        if dry_run:
            emit(self.console, f"[Dry run] Os hooks seriam instalados em {repo_root}")
        elif success:
            emit(self.console, f"Hooks instalados em {repo_root}")
        return success

    def offer_readme(self, repo_root: Path) -> None:
        """Pergunta (uma vez por instalação) se deve criar .githooks/README.md."""
        hook_root = Path(repo_root) / self.settings.paths.hooks_dir
        if (hook_root / "README.md").exists():
            return

        if self._readme_answer is None:
            if not hook_root.is_dir():
                emit(self.console, f"Parece que o repositório {repo_root} ainda não tem uma pasta .githooks.")
            else:
                emit(self.console, f"Parece que a pasta {hook_root} ainda não tem um README.md.")
            self._readme_answer = self.decider.confirm(
                "  Gostaria de criar um README com uma visão geral do Githooks?", default=True
            )

        if self._readme_answer:
            write_readme(repo_root, self.settings.paths.hooks_dir)

    def find_repositories(self, start_dir: Path) -> List[Path]:
        """Raízes de repositórios (diretórios com .git) abaixo de start_dir, ordenadas."""
        found = []
        for dirpath, dirnames, _ in os.walk(start_dir):
            if ".git" in dirnames:
                found.append(Path(dirpath))
                dirnames.remove(".git")
        return sorted(found)

    def install_into_existing(self, options: InstallOptions) -> List[Path]:
        """
        Procura repositórios a partir do diretório informado, do
        githooks.previous.searchdir ou do HOME, e instala em todos.
        """
        start_dir = options.search_dir or self.config.get(KEY_PREVIOUS_SEARCHDIR, ConfigScope.GLOBAL)
        start_dir = Path(start_dir or "~").expanduser()

        if not start_dir.is_dir():
            raise InstallError(f"'{start_dir}' não é um diretório")

        emit(self.console, f"Instalando os hooks em repositórios existentes abaixo de {start_dir}")
        if not options.dry_run:
            self.config.set(KEY_PREVIOUS_SEARCHDIR, str(start_dir), ConfigScope.GLOBAL)

        installed = []
        for repo_root in self.find_repositories(start_dir):
            offer = not options.non_interactive and self.decider.interactive
            if self.install_into_repo(repo_root, dry_run=options.dry_run, offer_readme=offer):
                installed.append(repo_root)
        return installed

    # =========================================================================
    # Alias e atualizações
    # =========================================================================

    def setup_alias(self, dry_run: bool = False) -> bool:
        """Registra `git hooks <cmd>` como alias global."""
        command = f"!{shlex.quote(self.python)} -m githooks"
        if dry_run:
            emit(self.console, f"[Dry run] O alias git hooks seria configurado: {command}")
            return True
        if self.config.set(KEY_ALIAS, command, ConfigScope.GLOBAL):
            emit(self.console, "A ferramenta de linha de comando está disponível como 'git hooks <cmd>'")
            return True
        emit(self.console, "! Falha ao configurar o alias 'git hooks'")
        return False

    def setup_auto_update(self, options: InstallOptions) -> None:
        current = self.config.get(KEY_AUTOUPDATE_ENABLED)
        if current == "Y":
            return

        if current is not None:
            emit(self.console, "As verificações automáticas de atualização estão desativadas.")
            if options.non_interactive:
                return
            enable = self.decider.confirm(
                "Gostaria de reativá-las (uma vez por dia, após um commit)?", default=True
            )
        elif options.non_interactive:
            enable = True
        else:
            enable = self.decider.confirm(
                "Gostaria de ativar as verificações automáticas de atualização (uma vez por dia, após um commit)?",
                default=True,
            )

        if not enable:
            emit(self.console, "Se mudar de ideia, ative com:")
            emit(self.console, "  $ git config --global githooks.autoupdate.enabled Y")
            return

        scope = ConfigScope.LOCAL if options.single else ConfigScope.GLOBAL
        if options.dry_run:
            emit(self.console, "[Dry run] As verificações automáticas de atualização seriam ativadas")
        elif self.config.set(KEY_AUTOUPDATE_ENABLED, "Y", scope):
            emit(self.console, "As verificações automáticas de atualização estão ativas")
        else:
            emit(self.console, "! Falha ao ativar as verificações automáticas de atualização")

    # =========================================================================
    # Instalação completa
    # =========================================================================

    def install(self, options: InstallOptions, cwd: Optional[Path] = None) -> InstallReport:
        """
        Instalação completa.

        Raises:
            InstallError: Diretório de templates não encontrado (modo normal)
        """
        report = InstallReport()
        cwd = Path(cwd) if cwd else Path.cwd()

        if options.single:
            if find_hooks_dir(cwd, create=False) is None:
                raise InstallError("O diretório atual não é um repositório Git")
            if not options.dry_run:
                self.config.set(KEY_SINGLE_INSTALL, "yes", ConfigScope.LOCAL)
        else:
            report.template_dir = self.find_template_dir()
            report.templates = self.install_templates(report.template_dir, options.dry_run)

        if not self.setup_alias(options.dry_run):
            report.failures.append("alias")

        self.setup_auto_update(options)

        if options.single:
            offer = not options.non_interactive and self.decider.interactive
            if self.install_into_repo(cwd, dry_run=options.dry_run, offer_readme=offer):
                report.repositories.append(cwd)
            else:
                report.failures.append(str(cwd))
        else:
            report.repositories = self.install_into_existing(options)

        return report


# =============================================================================
# Helper Functions
# =============================================================================

def print_install_summary(report: InstallReport, console: Optional[Console] = None):
    """Printa resumo da instalação (helper para CLI)."""
    console = console or Console()
    table = Table(title="Instalação do Githooks")

    table.add_column("Item", style="cyan")
    table.add_column("Valor")

    table.add_row("Templates", str(report.template_dir) if report.template_dir else "-")
    table.add_row("Hooks de template", str(len(report.templates)))
    table.add_row("Repositórios", str(len(report.repositories)))
    table.add_row("Status", "✅" if report.success else "❌ " + ", ".join(report.failures))

    console.print(table)


__all__ = [
    "BASE_TEMPLATE",
    "HookInstaller",
    "InstallError",
    "InstallOptions",
    "InstallReport",
    "TEMPLATE_MARKER",
    "is_githooks_template",
    "print_install_summary",
    "render_template",
    "write_readme",
]
