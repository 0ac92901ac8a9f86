"""
GITHOOKS - Repository Context
Monta os componentes (ledger, trust, ignore, resolver, engine) de um repositório.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..git.client import GitClient, NotGitRepositoryError, find_git_dir
from ..prompts.decisions import DecisionProvider, create_decision_provider
from ..shared.sync import SharedRepoRegistry, SharedRepoSynchronizer
from ..update.checker import UpdateChecker
from .config_store import ConfigStore, GitConfigStore
from .engine import HookExecutionEngine
from .ignore import IgnoreFilter
from .ledger import ChecksumLedger
from .models import GithooksSettings
from .resolver import HookResolver
from .settings_loader import load_settings
from .status import HookStatusService
from .trust import TrustEvaluator


@dataclass
class RepositoryContext:
    """Tudo que os comandos precisam para operar em um repositório."""
    repo_root: Path
    git_dir: Path
    settings: GithooksSettings
    config: ConfigStore
    git: GitClient
    decider: DecisionProvider
    console: Console

    @property
    def hook_root(self) -> Path:
        return self.repo_root / self.settings.paths.hooks_dir

    @property
    def ledger(self) -> ChecksumLedger:
        return ChecksumLedger(self.git_dir / self.settings.paths.ledger_file)

    @property
    def trust(self) -> TrustEvaluator:
        return TrustEvaluator(self.hook_root / self.settings.paths.trust_marker, self.config, self.decider)

    @property
    def ignore_filter(self) -> IgnoreFilter:
        return IgnoreFilter([self.hook_root], self.settings.paths.ignore_file)

    @property
    def resolver(self) -> HookResolver:
        return HookResolver(self.repo_root, self.settings.paths.hooks_dir, self.settings.paths.trust_marker)

    @property
    def registry(self) -> SharedRepoRegistry:
        return SharedRepoRegistry(
            self.config,
            repo_root=self.repo_root,
            hooks_dir=self.settings.paths.hooks_dir,
            list_file=self.settings.paths.shared_list_file,
        )

    def status(self) -> HookStatusService:
        return HookStatusService(self.resolver, self.ignore_filter, self.trust, self.ledger)

    def synchronizer(self) -> SharedRepoSynchronizer:
        return SharedRepoSynchronizer(
            self.settings.paths.shared_cache_path,
            git=self.git,
            timeout=self.settings.shared.timeout_seconds,
            console=self.console,
        )

    def update_checker(self) -> UpdateChecker:
        return UpdateChecker(self.config, self.settings.update, decider=self.decider, console=self.console)

    def engine(self) -> HookExecutionEngine:
        return HookExecutionEngine(
            repo_root=self.repo_root,
            settings=self.settings,
            config=self.config,
            ledger=self.ledger,
            trust=self.trust,
            ignore_filter=self.ignore_filter,
            resolver=self.resolver,
            decider=self.decider,
            registry=self.registry,
            synchronizer=self.synchronizer(),
            update_checker=self.update_checker(),
            console=self.console,
        )


def build_context(
    repo_root: Optional[Path] = None,
    settings: Optional[GithooksSettings] = None,
    config: Optional[ConfigStore] = None,
    git: Optional[GitClient] = None,
    decider: Optional[DecisionProvider] = None,
    console: Optional[Console] = None,
) -> RepositoryContext:
    """
    Cria o contexto do repositório (padrão: diretório atual).

    Raises:
        NotGitRepositoryError: Se o diretório não for a raiz de um repositório
        SettingsLoadError: Se o arquivo de configuração for inválido
    """
    git = git or GitClient()
    repo_root = git.ensure_repo_root(Path(repo_root) if repo_root else Path.cwd())

    git_dir = find_git_dir(repo_root)
    if git_dir is None:
        raise NotGitRepositoryError(
            f"O diretório atual ({repo_root}) não parece ser a raiz de um repositório Git!"
        )

    settings = settings or load_settings()
    console = console or Console(highlight=False)

    return RepositoryContext(
        repo_root=repo_root,
        git_dir=git_dir,
        settings=settings,
        config=config or GitConfigStore(git, repo_root),
        git=git,
        decider=decider or create_decision_provider(settings.prompts, console),
        console=console,
    )


__all__ = ["RepositoryContext", "build_context"]
