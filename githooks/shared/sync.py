"""
GITHOOKS - Shared Repositories
Lista de repositórios de hooks compartilhados (global e local) e
sincronização (clone/pull) para o cache em ~/.githooks/shared.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from rich.console import Console

from ..core.config_store import ConfigScope, ConfigStore, KEY_SHARED
from ..core.formatters import emit
from ..core.models import HookSource, SharedRepo, SyncResult
from ..git.client import GitClient, GitError


logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


# =============================================================================
# Nomes e listas
# =============================================================================

def _url_path(url: str) -> str:
    if "://" in url:
        return urlsplit(url).path
    # Formato scp: usuario@host:org/repo.git
    if ":" in url and not url.startswith("/"):
        return url.split(":", 1)[1]
    return url


def normalize_shared_name(url: str) -> str:
    """
    Nome do diretório de cache de um repositório compartilhado.

    Usa os dois últimos segmentos do caminho, sem o sufixo .git, trocando
    caracteres não alfanuméricos por '_':

        https://example.com/a.git          -> a
        git@github.com:org/hooks.git       -> org_hooks
    """
    segments = [s for s in _url_path(url.strip()).split("/") if s]
    name = "/".join(segments[-2:])
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return _UNSAFE_CHARS.sub("_", name)


def parse_shared_list(values: Iterable[str]) -> List[str]:
    """URLs separadas por vírgula ou nova linha; comentários (#) e vazios ignorados."""
    urls = []
    for value in values:
        for line in value.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            for item in line.split(","):
                item = item.strip()
                if item and item not in urls:
                    urls.append(item)
    return urls


def read_shared_file(path: Path) -> List[str]:
    try:
        return parse_shared_list([Path(path).read_text(encoding="utf-8")])
    except (FileNotFoundError, NotADirectoryError):
        return []


# =============================================================================
# Registro (githooks.shared + .githooks/.shared)
# =============================================================================

class SharedRepoRegistry:
    """Leitura e edição das listas de repositórios compartilhados."""

    def __init__(
        self,
        config: ConfigStore,
        repo_root: Optional[Path] = None,
        hooks_dir: str = ".githooks",
        list_file: str = ".shared",
    ):
        self.config = config
        self.repo_root = Path(repo_root) if repo_root else None
        self.hooks_dir = hooks_dir
        self.list_file = list_file

    @property
    def local_file(self) -> Optional[Path]:
        if self.repo_root is None:
            return None
        return self.repo_root / self.hooks_dir / self.list_file

    def global_urls(self) -> List[str]:
        return parse_shared_list(self.config.get_all(KEY_SHARED, ConfigScope.GLOBAL))

    def local_urls(self) -> List[str]:
        if self.local_file is None:
            return []
        return read_shared_file(self.local_file)

    def global_repos(self) -> List[SharedRepo]:
        return [
            SharedRepo(url=url, name=normalize_shared_name(url), source=HookSource.SHARED_GLOBAL)
            for url in self.global_urls()
        ]

    def local_repos(self) -> List[SharedRepo]:
        return [
            SharedRepo(url=url, name=normalize_shared_name(url), source=HookSource.SHARED_LOCAL)
            for url in self.local_urls()
        ]

    def all_repos(self) -> List[SharedRepo]:
        return self.global_repos() + self.local_repos()

    # =========================================================================
    # Edição
    # =========================================================================

    def _require_local_file(self) -> Path:
        if self.local_file is None:
            raise ValueError("Lista local requer um repositório")
        return self.local_file

    def add(self, url: str, local: bool = False) -> bool:
        """Acrescenta a URL. False se ela já estava na lista."""
        if not local:
            if url in self.global_urls():
                return False
            return self.config.add(KEY_SHARED, url, ConfigScope.GLOBAL)

        path = self._require_local_file()
        if url in self.local_urls():
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        content = path.read_text(encoding="utf-8") if path.exists() else ""
        if content and not content.endswith("\n"):
            content += "\n"
        path.write_text(content + url + "\n", encoding="utf-8")
        return True

    def remove(self, url: str, local: bool = False) -> bool:
        """Remove a URL. False se ela não estava na lista."""
        if not local:
            urls = self.global_urls()
            if url not in urls:
                return False
            self.config.unset(KEY_SHARED, ConfigScope.GLOBAL)
            for remaining in urls:
                if remaining != url:
                    self.config.add(KEY_SHARED, remaining, ConfigScope.GLOBAL)
            return True

        path = self._require_local_file()
        if url not in self.local_urls():
            return False
        lines = path.read_text(encoding="utf-8").splitlines()
        kept = [line for line in lines if line.strip() != url]
        path.write_text("".join(line + "\n" for line in kept), encoding="utf-8")
        return True

    def clear(self, local: bool = False) -> bool:
        if not local:
            return self.config.unset(KEY_SHARED, ConfigScope.GLOBAL)

        path = self._require_local_file()
        if not path.exists():
            return False
        path.unlink()
        return True


# =============================================================================
# Sincronização
# =============================================================================

class SharedRepoSynchronizer:
    """
    Clona (primeira vez) ou atualiza (pull) cada repositório no cache.

    Falhas de rede nunca interrompem o hook: viram avisos com a saída do git.
    """

    def __init__(
        self,
        cache_dir: Path,
        git: Optional[GitClient] = None,
        timeout: Optional[float] = 300,
        console: Optional[Console] = None,
    ):
        self.cache_dir = Path(cache_dir)
        self.git = git or GitClient()
        self.timeout = timeout
        self.console = console or Console(highlight=False)

    def sync(self, repos: Iterable[SharedRepo]) -> List[SyncResult]:
        results = []
        for repo in repos:
            result = self.sync_one(repo)
            if not result.success:
                self._warn(result)
            results.append(result)
        return results

    def sync_one(self, repo: SharedRepo) -> SyncResult:
        cache_path = repo.cache_path(self.cache_dir)
        action = "pull" if (cache_path / ".git").exists() else "clone"

        try:
            if action == "pull":
                emit(self.console, f"* Atualizando hooks compartilhados de: {repo.url}")
                result = self.git.pull(cwd=cache_path, timeout=self.timeout)
            else:
                emit(self.console, f"* Obtendo hooks compartilhados de: {repo.url}")
                self.cache_dir.mkdir(parents=True, exist_ok=True)
                result = self.git.clone(repo.url, repo.name, cwd=self.cache_dir, timeout=self.timeout)
        except (GitError, OSError) as e:
            return SyncResult(repo=repo, action=action, success=False, output=str(e))

        return SyncResult(repo=repo, action=action, success=result.ok, output=result.output)

    def _warn(self, result: SyncResult) -> None:
        if result.action == "pull":
            emit(self.console, f"! Falha ao atualizar {result.repo.url}, saída do git pull:")
        else:
            emit(self.console, f"! Falha ao clonar {result.repo.url}, saída do git clone:")
        if result.output:
            emit(self.console, result.output)


__all__ = [
    "SharedRepoRegistry",
    "SharedRepoSynchronizer",
    "normalize_shared_name",
    "parse_shared_list",
    "read_shared_file",
]
