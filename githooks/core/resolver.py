"""
GITHOOKS - Hook Resolver
Localiza os arquivos de hook de um trigger (legado, compartilhados, locais)
e resolve os alvos dos comandos accept/enable/disable.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .models import HookFile, HookSource, LEGACY_HOOK_SUFFIX, SharedRepo


logger = logging.getLogger(__name__)


# =============================================================================
# Exceções
# =============================================================================

class HookNotFoundError(Exception):
    """Nenhum hook corresponde aos argumentos informados."""

    def __init__(self, args: Sequence[str]):
        self.args_given = list(args)
        super().__init__("Desculpe, não foi possível encontrar hooks que correspondam a isso")


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class HookGroup:
    """Arquivos de hook de um trigger vindos de uma mesma raiz."""
    trigger: str
    source: HookSource
    root: Path
    files: List[HookFile] = field(default_factory=list)
    single_file: bool = False


@dataclass
class ResolvedTarget:
    """Alvo resolvido de accept/enable/disable, com os candidatos considerados."""
    path: Path
    candidates: List[Path] = field(default_factory=list)

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


# =============================================================================
# Resolver
# =============================================================================

def is_hook_file(path: Path) -> bool:
    """Arquivos regulares que não começam com '.' (exclui .ignore, .shared, ...)."""
    return path.is_file() and not path.name.startswith(".")


class HookResolver:
    """
    Descobre os hooks a cada invocação. Nada aqui é persistido.

    A ordem dentro de um diretório é lexicográfica, pois hooks posteriores
    podem depender de efeitos colaterais dos anteriores.
    """

    def __init__(self, repo_root: Path, hooks_dir: str = ".githooks", trust_marker: str = "trust-all"):
        self.repo_root = Path(repo_root)
        self.hooks_dir = hooks_dir
        self.trust_marker = trust_marker

    @property
    def hook_root(self) -> Path:
        return self.repo_root / self.hooks_dir

    # =========================================================================
    # Descoberta por trigger
    # =========================================================================

    def legacy_hook(self, trigger: str, hook_folder: Path) -> Optional[HookFile]:
        """Hook antigo salvo como <trigger>.replaced.githook, se executável."""
        path = Path(hook_folder).absolute() / f"{trigger}{LEGACY_HOOK_SUFFIX}"
        hook = HookFile(path=path, trigger=trigger, source=HookSource.LEGACY)
        if path.is_file() and hook.is_executable:
            return hook
        return None

    def hooks_in(self, parent: Path, trigger: str, source: HookSource = HookSource.LOCAL) -> Optional[HookGroup]:
        """
        Hooks de um trigger dentro de uma raiz: todos os arquivos do
        diretório <parent>/<trigger>, ou o arquivo <parent>/<trigger>.
        """
        target = Path(parent).absolute() / trigger

        if target.is_dir():
            files = [
                HookFile(path=p, trigger=trigger, source=source)
                for p in sorted(target.iterdir(), key=lambda p: p.name)
                if is_hook_file(p)
            ]
            return HookGroup(trigger=trigger, source=source, root=Path(parent), files=files)

        if target.is_file():
            return HookGroup(
                trigger=trigger,
                source=source,
                root=Path(parent),
                files=[HookFile(path=target, trigger=trigger, source=source)],
                single_file=True,
            )

        return None

    def local_hooks(self, trigger: str) -> Optional[HookGroup]:
        return self.hooks_in(self.hook_root, trigger, HookSource.LOCAL)

    @staticmethod
    def shared_root(cache_path: Path) -> Path:
        """Repositórios compartilhados podem ter os hooks em .githooks/ ou na raiz."""
        nested = cache_path / ".githooks"
        return nested if nested.is_dir() else cache_path

    def shared_hooks(self, repos: Sequence[SharedRepo], cache_dir: Path, trigger: str) -> List[HookGroup]:
        """Hooks do trigger em cada repositório compartilhado já sincronizado, na ordem da lista."""
        groups = []
        for repo in repos:
            cache_path = repo.cache_path(cache_dir)
            if not cache_path.is_dir():
                logger.debug("Repositório compartilhado ainda não sincronizado: %s", repo.url)
                continue
            group = self.hooks_in(self.shared_root(cache_path), trigger, repo.source)
            if group is not None:
                groups.append(group)
        return groups

    # =========================================================================
    # Alvos de accept/enable/disable
    # =========================================================================

    def candidates(self, name: str) -> List[Path]:
        """
        Candidatos por nome, em ordem de preferência:
        1. diretórios de trigger chamados `name` (a subárvore inteira)
        2. arquivos chamados `name` dentro dos diretórios de trigger
        Cada grupo em ordem lexicográfica.
        """
        if not self.hook_root.is_dir():
            return []

        entries = sorted(self.hook_root.iterdir(), key=lambda p: p.name)
        directories = [p for p in entries if p.is_dir() and p.name == name]
        files = [
            child
            for entry in entries if entry.is_dir()
            for child in sorted(entry.iterdir(), key=lambda p: p.name)
            if child.name == name and child.is_file()
        ]
        return [p.absolute() for p in directories + files]

    def find_target(self, args: Sequence[str]) -> ResolvedTarget:
        """
        Resolve os argumentos de accept/enable/disable.

        - sem argumentos: a raiz .githooks inteira
        - trigger + arquivo: .githooks/<trigger>/<arquivo>
        - um argumento: caminho literal > .githooks/<arg> > busca por nome

        Raises:
            HookNotFoundError: Se nada corresponder
        """
        args = [a for a in args if a]
        target: Optional[Path] = None
        candidates: List[Path] = []

        if not args:
            if self.hook_root.exists():
                target = self.hook_root.absolute()

        elif len(args) >= 2:
            candidate = self.hook_root / args[0] / args[1]
            if candidate.exists():
                target = candidate.absolute()

        else:
            arg = args[0]
            literal = Path(arg) if Path(arg).is_absolute() else self.repo_root / arg
            if literal.exists():
                target = Path(os.path.normpath(literal.absolute()))
            elif (self.hook_root / arg).is_file():
                target = (self.hook_root / arg).absolute()
            else:
                candidates = self.candidates(arg)
                if candidates:
                    target = candidates[0]

        if target is None:
            raise HookNotFoundError(args)

        if self.hooks_dir not in target.parts:
            if (target / self.hooks_dir).is_dir():
                target = target / self.hooks_dir
            else:
                raise HookNotFoundError(args)

        return ResolvedTarget(path=target, candidates=candidates)

    def iter_files(self, target: Path) -> List[Path]:
        """Todos os arquivos de hook sob o alvo (recursivo, ordem lexicográfica)."""
        target = Path(target)
        if target.is_file():
            return [target.absolute()]

        files = []
        for path in sorted(target.rglob("*")):
            if not is_hook_file(path):
                continue
            if path.name == self.trust_marker and path.parent == self.hook_root:
                continue
            files.append(path.absolute())
        return files


__all__ = [
    "HookGroup",
    "HookNotFoundError",
    "HookResolver",
    "ResolvedTarget",
    "is_hook_file",
]
