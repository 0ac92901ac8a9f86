"""
GITHOOKS - Git Client
Executa comandos git (config, clone, pull) e localiza diretórios do repositório.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Exceções
# =============================================================================

class GitError(Exception):
    """Erro ao executar comando git."""
    pass


class NotGitRepositoryError(GitError):
    """Diretório não é um repositório git."""
    pass


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class GitResult:
    """Resultado de um comando git."""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout + stderr, como o usuário veria no terminal."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


# =============================================================================
# Git Client
# =============================================================================

class GitClient:
    """
    Wrapper fino sobre o executável `git`.

    Responsabilidades:
    - Executar comandos git com timeout
    - Ler/escrever git config
    - Clonar e atualizar repositórios compartilhados
    - Localizar .git e .git/hooks (suporta worktrees)
    """

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def run(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        check: bool = False,
        timeout: Optional[float] = None,
    ) -> GitResult:
        """
        Executa um comando git.

        Args:
            args: Argumentos (sem o 'git' inicial)
            cwd: Diretório de trabalho
            check: Se True, levanta GitError quando o comando falha
            timeout: Tempo máximo em segundos

        Raises:
            GitError: Se git não existir, estourar o timeout, ou check=True e falhar
        """
        cmd = [self.executable] + list(args)
        logger.debug("git %s (cwd=%s)", " ".join(args), cwd)

        try:
            completed = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            raise GitError("Git não encontrado no PATH")
        except subprocess.TimeoutExpired:
            raise GitError(f"Comando git excedeu {timeout}s: git {' '.join(args)}")

        result = GitResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if check and not result.ok:
            raise GitError(
                f"Comando git falhou: git {' '.join(args)}\n"
                f"Stderr: {result.stderr}"
            )

        return result

    # =========================================================================
    # Config
    # =========================================================================

    def config_get(self, key: str, scope_args: List[str], cwd: Optional[Path] = None) -> Optional[str]:
        result = self.run(["config"] + scope_args + ["--get", key], cwd=cwd)
        if not result.ok:
            return None
        return result.stdout.rstrip("\n")

    def config_get_all(self, key: str, scope_args: List[str], cwd: Optional[Path] = None) -> List[str]:
        result = self.run(["config"] + scope_args + ["--get-all", key], cwd=cwd)
        if not result.ok:
            return []
        return [line for line in result.stdout.splitlines() if line]

    def config_set(self, key: str, value: str, scope_args: List[str], cwd: Optional[Path] = None) -> bool:
        return self.run(["config"] + scope_args + [key, value], cwd=cwd).ok

    def config_add(self, key: str, value: str, scope_args: List[str], cwd: Optional[Path] = None) -> bool:
        return self.run(["config"] + scope_args + ["--add", key, value], cwd=cwd).ok

    def config_unset(self, key: str, scope_args: List[str], cwd: Optional[Path] = None) -> bool:
        return self.run(["config"] + scope_args + ["--unset-all", key], cwd=cwd).ok

    # =========================================================================
    # Repositórios
    # =========================================================================

    def clone(self, url: str, name: str, cwd: Path, timeout: Optional[float] = None) -> GitResult:
        return self.run(["clone", url, name], cwd=cwd, timeout=timeout)

    def pull(self, cwd: Path, timeout: Optional[float] = None) -> GitResult:
        return self.run(["pull"], cwd=cwd, timeout=timeout)

    def remote_url(self, cwd: Path) -> Optional[str]:
        return self.config_get("remote.origin.url", [], cwd=cwd)

    def is_repository(self, path: Path) -> bool:
        """Verifica se o diretório está dentro de um repositório git."""
        try:
            return self.run(["rev-parse", "--git-dir"], cwd=path).ok
        except GitError:
            return False

    def ensure_repo_root(self, path: Path) -> Path:
        """
        Garante que `path` é a raiz de um repositório git.

        Raises:
            NotGitRepositoryError: Se não for
        """
        path = Path(path).resolve()
        if not self.is_repository(path) or find_git_dir(path) is None:
            raise NotGitRepositoryError(
                f"O diretório atual ({path}) não parece ser a raiz de um repositório Git!"
            )
        return path


# =============================================================================
# Helper Functions
# =============================================================================

def find_git_dir(repo_root: Path) -> Optional[Path]:
    """Encontra o diretório .git (suporta worktrees com arquivo .git)."""
    git_dir = Path(repo_root) / ".git"

    if git_dir.is_dir():
        return git_dir

    # Worktree: arquivo .git apontando para o git dir real
    if git_dir.is_file():
        try:
            git_content = git_dir.read_text().strip()
        except OSError:
            return None
        if git_content.startswith("gitdir:"):
            real_git_dir = Path(git_content.split(":", 1)[1].strip())
            if not real_git_dir.is_absolute():
                real_git_dir = Path(repo_root) / real_git_dir
            return real_git_dir

    return None


def find_hooks_dir(repo_root: Path, create: bool = True) -> Optional[Path]:
    """Encontra (e opcionalmente cria) o diretório .git/hooks."""
    git_dir = find_git_dir(repo_root)
    if git_dir is None:
        return None

    hooks_dir = git_dir / "hooks"
    if create:
        hooks_dir.mkdir(parents=True, exist_ok=True)
    return hooks_dir


__all__ = [
    "GitClient",
    "GitResult",
    "GitError",
    "NotGitRepositoryError",
    "find_git_dir",
    "find_hooks_dir",
]
