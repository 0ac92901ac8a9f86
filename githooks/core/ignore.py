"""
GITHOOKS - Ignore Filter
Padrões glob (.ignore) que excluem arquivos de hook da execução e da listagem.
"""

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Tuple


def read_patterns(ignore_file: Path) -> List[str]:
    """Lê um arquivo .ignore: um glob por linha, ignorando comentários (#) e linhas vazias."""
    try:
        lines = ignore_file.read_text(encoding="utf-8").splitlines()
    except (FileNotFoundError, NotADirectoryError):
        return []

    patterns = []
    for line in lines:
        line = line.rstrip("\r")
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


class IgnoreFilter:
    """
    Combina o .ignore global da raiz de hooks com o .ignore do trigger.

    Ex: .githooks/.ignore + .githooks/pre-commit/.ignore
    """

    def __init__(self, hook_roots: Iterable[Path], ignore_file: str = ".ignore"):
        self.hook_roots = [Path(root) for root in hook_roots]
        self.ignore_file = ignore_file
        self._cache: Dict[str, Tuple[str, ...]] = {}

    def patterns_for(self, trigger: str) -> List[str]:
        if trigger not in self._cache:
            patterns: List[str] = []
            for root in self.hook_roots:
                patterns.extend(read_patterns(root / self.ignore_file))
                patterns.extend(read_patterns(root / trigger / self.ignore_file))
            self._cache[trigger] = tuple(patterns)
        return list(self._cache[trigger])

    def is_ignored(self, hook_path: Path, trigger: str) -> bool:
        """True se o nome do arquivo casa com algum padrão."""
        name = Path(hook_path).name
        return any(fnmatchcase(name, pattern) for pattern in self.patterns_for(trigger))

    def with_root(self, root: Path) -> "IgnoreFilter":
        """Novo filtro que também considera os .ignore de outra raiz (hooks compartilhados)."""
        return IgnoreFilter(self.hook_roots + [Path(root)], self.ignore_file)


__all__ = ["IgnoreFilter", "read_patterns"]
