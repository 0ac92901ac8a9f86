"""
GITHOOKS - Core Engine
Executa os hooks de um trigger do git, fase por fase.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Mapping, Optional, Sequence, TYPE_CHECKING

from rich.console import Console

from .config_store import ConfigStore, KEY_DISABLE
from .formatters import emit
from .ignore import IgnoreFilter
from .ledger import ChecksumLedger, compute_checksum
from .models import (
    Decision,
    GithooksSettings,
    HookFile,
    HookOutcome,
    HookRunResult,
    HookSource,
    HookState,
    InvocationResult,
)
from .resolver import HookGroup, HookResolver
from .trust import TrustEvaluator

if TYPE_CHECKING:
    from ..prompts.decisions import DecisionProvider
    from ..shared.sync import SharedRepoRegistry, SharedRepoSynchronizer
    from ..update.checker import UpdateChecker


logger = logging.getLogger(__name__)

HookRunner = Callable[[List[str], Path], int]


def run_command(cmd: List[str], cwd: Path) -> int:
    """Executa o hook herdando stdin/stdout/stderr (ex: pre-push lê do stdin)."""
    return subprocess.run(cmd, cwd=str(cwd), check=False).returncode


# =============================================================================
# Estado de uma invocação
# =============================================================================

@dataclass
class _RunState:
    """Estado que vale só para uma invocação (ex: "aceitar todos")."""
    trigger: str
    args: Sequence[str]
    accept_all: bool = False
    trusted: Optional[bool] = None


# =============================================================================
# Engine Principal
# =============================================================================

class HookExecutionEngine:
    """
    Motor de execução dos hooks.

    Fases (para na primeira falha):
    1. chave de desativação (githooks.disable / GITHOOKS_DISABLE)
    2. hook antigo salvo como <trigger>.replaced.githook
    3. hooks compartilhados globais (githooks.shared)
    4. hooks compartilhados locais (.githooks/.shared)
    5. hooks locais (.githooks/<trigger>)
    """

    def __init__(
        self,
        repo_root: Path,
        settings: GithooksSettings,
        config: ConfigStore,
        ledger: ChecksumLedger,
        trust: TrustEvaluator,
        ignore_filter: IgnoreFilter,
        resolver: HookResolver,
        decider: Optional["DecisionProvider"] = None,
        registry: Optional["SharedRepoRegistry"] = None,
        synchronizer: Optional["SharedRepoSynchronizer"] = None,
        update_checker: Optional["UpdateChecker"] = None,
        console: Optional[Console] = None,
        runner: HookRunner = run_command,
        environ: Optional[Mapping[str, str]] = None,
    ):
        if decider is None:
            from ..prompts.decisions import NonInteractiveDecisionProvider
            decider = NonInteractiveDecisionProvider()

        self.repo_root = Path(repo_root)
        self.settings = settings
        self.config = config
        self.ledger = ledger
        self.trust = trust
        self.ignore_filter = ignore_filter
        self.resolver = resolver
        self.decider = decider
        self.registry = registry
        self.synchronizer = synchronizer
        self.update_checker = update_checker
        self.console = console or Console(highlight=False)
        self.runner = runner
        self.environ = os.environ if environ is None else environ

    # =========================================================================
    # Invocação
    # =========================================================================

    def is_disabled(self) -> bool:
        if self.environ.get("GITHOOKS_DISABLE"):
            return True
        return (self.config.get(KEY_DISABLE) or "") in ("y", "Y")

    def process(self, hook_path: Path, args: Sequence[str] = ()) -> InvocationResult:
        """
        Processa uma invocação de hook do git.

        Args:
            hook_path: Caminho do hook chamado pelo git (.git/hooks/<trigger>)
            args: Argumentos repassados pelo git

        Returns:
            InvocationResult (exit_code 1 se algum hook falhou)

        Raises:
            LedgerWriteError: Se não for possível gravar uma decisão no ledger
        """
        hook_path = Path(hook_path)
        trigger = hook_path.name
        invocation = InvocationResult(trigger=trigger)

        if self.is_disabled():
            logger.debug("Githooks desativado: ignorando %s", trigger)
            invocation.skipped_all = True
            return invocation

        state = _RunState(trigger=trigger, args=list(args))

        for group in self._phases(trigger, hook_path.parent):
            ignore_filter = self.ignore_filter
            if group.source in (HookSource.SHARED_GLOBAL, HookSource.SHARED_LOCAL):
                ignore_filter = ignore_filter.with_root(group.root)

            for hook in group.files:
                result = self.execute_hook(hook, state, ignore_filter)
                invocation.results.append(result)
                if result.failed:
                    logger.debug("%s falhou com código %d", hook.path, result.exit_code)
                    return invocation

        if self.update_checker is not None:
            self.update_checker.check_for_updates(trigger)

        return invocation

    def _phases(self, trigger: str, hook_folder: Path) -> Iterator[HookGroup]:
        """Grupos de hooks na ordem de execução. Gerado sob demanda: uma falha interrompe as fases seguintes."""
        legacy = self.resolver.legacy_hook(trigger, hook_folder)
        if legacy is not None:
            yield HookGroup(trigger=trigger, source=HookSource.LEGACY, root=Path(hook_folder),
                            files=[legacy], single_file=True)

        if self.registry is not None:
            cache_dir = self.settings.paths.shared_cache_path
            for repos in (self.registry.global_repos, self.registry.local_repos):
                shared = repos()
                if not shared:
                    continue
                if self.synchronizer is not None and trigger in self.settings.shared.sync_triggers:
                    self.synchronizer.sync(shared)
                yield from self.resolver.shared_hooks(shared, cache_dir, trigger)

        local = self.resolver.local_hooks(trigger)
        if local is not None:
            yield local

    # =========================================================================
    # Hook individual
    # =========================================================================

    def execute_hook(
        self,
        hook: HookFile,
        state: _RunState,
        ignore_filter: Optional[IgnoreFilter] = None,
    ) -> HookRunResult:
        if not hook.path.is_file():
            return HookRunResult(hook=hook, outcome=HookOutcome.MISSING)

        if (ignore_filter or self.ignore_filter).is_ignored(hook.path, hook.trigger):
            logger.debug("Ignorado: %s", hook.path)
            return HookRunResult(hook=hook, outcome=HookOutcome.IGNORED)

        if state.trusted is None:
            state.trusted = self.trust.resolve()

        if not state.trusted:
            outcome = self._check_opt_in(hook, state)
            if outcome is not None:
                return HookRunResult(hook=hook, outcome=outcome)

        return self._run(hook, state.args)

    def _check_opt_in(self, hook: HookFile, state: _RunState) -> Optional[HookOutcome]:
        """
        Consulta o ledger e, se preciso, pergunta ao usuário.

        Returns:
            None se o hook pode rodar, senão o motivo para não rodar
        """
        checksum = compute_checksum(hook.path)
        status = self.ledger.classify(hook.path, checksum)

        if status == HookState.ACTIVE:
            return None

        if status == HookState.DISABLED:
            emit(self.console, f"* Ignorando hook desativado {hook.path}")
            self._print_enable_hint(hook)
            return HookOutcome.DISABLED

        if status == HookState.PENDING_NEW:
            emit(self.console, f"? Novo arquivo de hook encontrado: {hook.path}")
        else:
            emit(self.console, f"? Arquivo de hook alterado: {hook.path}")

        if state.accept_all:
            emit(self.console, "  Já aceito")
        else:
            decision = self.decider.accept_hook(hook, changed=status == HookState.PENDING_CHANGED)

            if decision == Decision.NO:
                emit(self.console, f"* Não executando {hook.name}")
                return HookOutcome.DECLINED

            if decision == Decision.DISABLE:
                emit(self.console, f"* Desativado {hook.path}")
                self._print_enable_hint(hook)
                self.ledger.record_disabled(hook.path)
                return HookOutcome.DISABLED

            if decision == Decision.ALL:
                state.accept_all = True

        self.ledger.record_accepted(hook.path, checksum)
        return None

    def _print_enable_hint(self, hook: HookFile) -> None:
        emit(self.console, f"  Use `git hooks enable {hook.trigger} {hook.name}` para ativá-lo novamente")
        emit(self.console, f"  Ou edite/apague o arquivo {self.ledger.ledger_path} para ativá-lo novamente")

    def _run(self, hook: HookFile, args: Sequence[str]) -> HookRunResult:
        """Executável roda direto; senão é interpretado pelo sh."""
        if hook.is_executable:
            cmd = [str(hook.path)] + list(args)
        else:
            cmd = ["sh", str(hook.path)] + list(args)

        logger.debug("Executando %s", " ".join(cmd))
        try:
            exit_code = self.runner(cmd, self.repo_root)
        except OSError as e:
            emit(self.console, f"! Não foi possível executar {hook.path}: {e}")
            return HookRunResult(hook=hook, outcome=HookOutcome.FAILED, exit_code=126)

        if exit_code != 0:
            return HookRunResult(hook=hook, outcome=HookOutcome.FAILED, exit_code=exit_code)
        return HookRunResult(hook=hook, outcome=HookOutcome.EXECUTED)


__all__ = ["HookExecutionEngine", "run_command"]
