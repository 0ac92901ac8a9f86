"""
GITHOOKS - Core Data Models
Estruturas de dados do engine de execução de hooks.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Dict, Any, Optional


# =============================================================================
# Constants
# =============================================================================

LEGACY_HOOK_SUFFIX = ".replaced.githook"
SHARED_TRIGGER_NAME = ".githooks.shared.trigger"
DISABLED_MARKER = "disabled>"


# =============================================================================
# Enums
# =============================================================================

class HookSource(str, Enum):
    """De onde veio um arquivo de hook."""
    LOCAL = "local"
    SHARED_GLOBAL = "shared:global"
    SHARED_LOCAL = "shared:local"
    LEGACY = "previous"


class HookState(str, Enum):
    """Estado de um hook para exibição (list) e decisão de execução."""
    IGNORED = "ignored"
    TRUSTED = "active / trusted"
    DISABLED = "disabled"
    PENDING_NEW = "pending / new"
    PENDING_CHANGED = "pending / changed"
    ACTIVE = "active"

    @property
    def is_pending(self) -> bool:
        return self in (HookState.PENDING_NEW, HookState.PENDING_CHANGED)


class RecordKind(str, Enum):
    """Tipos de registro no ledger de checksums."""
    ACCEPTED = "accepted"
    DISABLED = "disabled"


class Decision(str, Enum):
    """Resposta do usuário para um hook novo ou alterado."""
    YES = "yes"
    ALL = "all"
    NO = "no"
    DISABLE = "disable"


class TrustState(str, Enum):
    """Estados possíveis de confiança de um repositório."""
    NO_MARKER = "no-marker"
    UNSET = "unset"
    ACCEPTED = "accepted"
    DENIED = "denied"


class HookOutcome(str, Enum):
    """Resultado da tentativa de executar um arquivo de hook."""
    EXECUTED = "executed"
    FAILED = "failed"
    IGNORED = "ignored"
    DISABLED = "disabled"
    DECLINED = "declined"
    MISSING = "missing"


# =============================================================================
# Hook Files
# =============================================================================

@dataclass(frozen=True)
class HookFile:
    """Um arquivo de hook descoberto em uma invocação (nunca persistido)."""
    path: Path
    trigger: str
    source: HookSource = HookSource.LOCAL

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_executable(self) -> bool:
        """True se o arquivo tem o bit de execução."""
        try:
            return self.path.stat().st_mode & 0o111 != 0
        except OSError:
            return False


# =============================================================================
# Ledger Records
# =============================================================================

@dataclass(frozen=True)
class LedgerRecord:
    """
    Uma linha do ledger: checksum aceito ou marcador de desativação.

    Formato em disco (compatível com arquivos antigos):
        <checksum> <caminho absoluto>
        disabled> <caminho absoluto>
    """
    path: str
    kind: RecordKind
    checksum: Optional[str] = None

    def __post_init__(self):
        if self.kind == RecordKind.ACCEPTED and not self.checksum:
            raise ValueError("Registro 'accepted' requer checksum")

    @classmethod
    def accepted(cls, path: str, checksum: str) -> "LedgerRecord":
        return cls(path=path, kind=RecordKind.ACCEPTED, checksum=checksum)

    @classmethod
    def disabled(cls, path: str) -> "LedgerRecord":
        return cls(path=path, kind=RecordKind.DISABLED)

    @classmethod
    def from_line(cls, line: str) -> Optional["LedgerRecord"]:
        """Parseia uma linha do ledger. Retorna None para linhas inválidas."""
        line = line.rstrip("\r\n")
        if not line.strip():
            return None

        state, sep, path = line.partition(" ")
        if not sep or not path:
            return None

        if state == DISABLED_MARKER:
            return cls.disabled(path)
        return cls.accepted(path, state)

    def to_line(self) -> str:
        if self.kind == RecordKind.DISABLED:
            return f"{DISABLED_MARKER} {self.path}"
        return f"{self.checksum} {self.path}"


# =============================================================================
# Shared Repositories
# =============================================================================

@dataclass(frozen=True)
class SharedRepo:
    """Repositório externo de hooks compartilhados."""
    url: str
    name: str
    source: HookSource = HookSource.SHARED_GLOBAL

    def cache_path(self, cache_dir: Path) -> Path:
        return cache_dir / self.name


@dataclass
class SyncResult:
    """Resultado da sincronização (clone ou pull) de um repositório."""
    repo: SharedRepo
    action: str
    success: bool
    output: str = ""


# =============================================================================
# Execution Results
# =============================================================================

@dataclass
class HookRunResult:
    """Resultado de um arquivo de hook individual."""
    hook: HookFile
    outcome: HookOutcome
    exit_code: int = 0

    @property
    def failed(self) -> bool:
        return self.outcome == HookOutcome.FAILED


@dataclass
class InvocationResult:
    """Resultado completo de uma invocação de trigger."""
    trigger: str
    results: List[HookRunResult] = field(default_factory=list)
    skipped_all: bool = False

    @property
    def failed(self) -> bool:
        return any(r.failed for r in self.results)

    @property
    def exit_code(self) -> int:
        """0 = sucesso (inclui hooks recusados/ignorados), 1 = algum hook falhou."""
        return 1 if self.failed else 0

    def by_outcome(self) -> Dict[HookOutcome, List[HookRunResult]]:
        result: Dict[HookOutcome, List[HookRunResult]] = {}
        for run in self.results:
            result.setdefault(run.outcome, []).append(run)
        return result


# =============================================================================
# Settings
# =============================================================================

@dataclass
class PathSettings:
    """Nomes de arquivos e diretórios usados pelo GITHOOKS."""
    hooks_dir: str = ".githooks"
    ledger_file: str = ".githooks.checksum"
    trust_marker: str = "trust-all"
    shared_list_file: str = ".shared"
    ignore_file: str = ".ignore"
    install_dir: str = "~/.githooks"
    shared_cache_dir: str = "~/.githooks/shared"

    @property
    def install_path(self) -> Path:
        return Path(self.install_dir).expanduser()

    @property
    def shared_cache_path(self) -> Path:
        return Path(self.shared_cache_dir).expanduser()


@dataclass
class UpdateSettings:
    """Configuração do verificador de atualizações."""
    url: str = "https://pypi.org/pypi/githooks/json"
    package: str = "githooks"
    interval_seconds: int = 86400
    timeout_seconds: int = 30
    comparator: str = "lexicographic"

    def __post_init__(self):
        if self.comparator not in ("lexicographic", "numeric"):
            raise ValueError(
                f"update.comparator deve ser 'lexicographic' ou 'numeric', encontrado: {self.comparator}"
            )


@dataclass
class SharedSettings:
    """Configuração da sincronização de repositórios compartilhados."""
    timeout_seconds: int = 300
    sync_triggers: List[str] = field(
        default_factory=lambda: ["post-merge", SHARED_TRIGGER_NAME]
    )


@dataclass
class PromptSettings:
    """Respostas padrão quando não há terminal interativo."""
    auto_accept_non_interactive: bool = False
    install_update_non_interactive: bool = False


@dataclass
class GithooksSettings:
    """Configuração global do GITHOOKS."""
    version: str = "1.0"
    managed_hooks: List[str] = field(default_factory=list)
    paths: PathSettings = field(default_factory=PathSettings)
    update: UpdateSettings = field(default_factory=UpdateSettings)
    shared: SharedSettings = field(default_factory=SharedSettings)
    prompts: PromptSettings = field(default_factory=PromptSettings)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_managed(self, trigger: str) -> bool:
        return trigger in self.managed_hooks


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Constants
    "LEGACY_HOOK_SUFFIX",
    "SHARED_TRIGGER_NAME",
    "DISABLED_MARKER",

    # Enums
    "HookSource",
    "HookState",
    "RecordKind",
    "Decision",
    "TrustState",
    "HookOutcome",

    # Core models
    "HookFile",
    "LedgerRecord",
    "SharedRepo",
    "SyncResult",
    "HookRunResult",
    "InvocationResult",

    # Settings
    "PathSettings",
    "UpdateSettings",
    "SharedSettings",
    "PromptSettings",
    "GithooksSettings",
]
