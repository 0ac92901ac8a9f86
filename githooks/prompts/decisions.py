"""
GITHOOKS - Decision Providers
Perguntas feitas ao usuário durante a execução dos hooks e a instalação.

O engine nunca lê o terminal diretamente: recebe um DecisionProvider.
Sem terminal (CI, GUIs, GITHOOKS_NON_INTERACTIVE), as respostas vêm da
configuração e nada bloqueia.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..core.formatters import emit
from ..core.models import Decision, HookFile, PromptSettings


logger = logging.getLogger(__name__)

DEFAULT_TTY = "/dev/tty"


# =============================================================================
# Interface
# =============================================================================

class DecisionProvider(ABC):
    """Fonte das decisões yes/all/no/disable, confiança e atualização."""

    interactive: bool = False

    @abstractmethod
    def accept_hook(self, hook: HookFile, changed: bool) -> Decision:
        """Hook novo ou alterado: executar, executar todos, pular ou desativar?"""

    @abstractmethod
    def trust_repository(self, repo_root: Path) -> Optional[bool]:
        """Confiar em todos os hooks do repositório? None = sem decisão."""

    @abstractmethod
    def install_update(self, version: str) -> bool:
        """Instalar a nova versão encontrada?"""

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool:
        """Pergunta genérica sim/não."""


# =============================================================================
# Non-interactive
# =============================================================================

class NonInteractiveDecisionProvider(DecisionProvider):
    """Respostas fixas, nunca bloqueia."""

    interactive = False

    def __init__(self, auto_accept: bool = False, install_updates: bool = False):
        self.auto_accept = auto_accept
        self.install_updates = install_updates

    def accept_hook(self, hook: HookFile, changed: bool) -> Decision:
        return Decision.YES if self.auto_accept else Decision.NO

    def trust_repository(self, repo_root: Path) -> Optional[bool]:
        return None

    def install_update(self, version: str) -> bool:
        return self.install_updates

    def confirm(self, question: str, default: bool = False) -> bool:
        return default


# =============================================================================
# Terminal
# =============================================================================

class TerminalDecisionProvider(DecisionProvider):
    """
    Lê as respostas do terminal controlador (/dev/tty), já que o stdin do
    hook pode estar ocupado pelo git (ex: pre-push).
    """

    interactive = True

    def __init__(
        self,
        console: Optional[Console] = None,
        tty_path: str = DEFAULT_TTY,
        fallback: Optional[DecisionProvider] = None,
    ):
        self.console = console or Console(highlight=False)
        self.tty_path = tty_path
        self.fallback = fallback or NonInteractiveDecisionProvider()

    def _ask(self, question: str) -> Optional[str]:
        """Mostra a pergunta e lê uma linha. None se o terminal não estiver disponível."""
        emit(self.console, question, end="")
        try:
            with open(self.tty_path, "r") as tty:
                answer = tty.readline()
        except OSError as e:
            logger.debug("Terminal indisponível (%s): usando resposta padrão", e)
            emit(self.console, "")
            return None
        return answer.strip()

    def accept_hook(self, hook: HookFile, changed: bool) -> Decision:
        answer = self._ask("  Aceitar as alterações? (Sim, todos, não, desativar) [Y/a/n/d] ")
        if answer is None:
            return self.fallback.accept_hook(hook, changed)

        answer = answer.lower()
        if answer == "n":
            return Decision.NO
        if answer == "d":
            return Decision.DISABLE
        if answer == "a":
            return Decision.ALL
        return Decision.YES

    def trust_repository(self, repo_root: Path) -> Optional[bool]:
        emit(self.console, "! Este repositório pede para confiar em todos os hooks atuais e futuros sem perguntar")
        answer = self._ask("  Permitir a execução de todos os hooks atuais e futuros? [y/N] ")
        if answer is None:
            return self.fallback.trust_repository(repo_root)
        return answer.lower() == "y"

    def install_update(self, version: str) -> bool:
        emit(self.console, f"* Há uma nova atualização do Githooks disponível: versão {version}")
        answer = self._ask("    Deseja instalá-la agora? [Y/n] ")
        if answer is None:
            return self.fallback.install_update(version)
        return answer.lower() in ("", "y")

    def confirm(self, question: str, default: bool = False) -> bool:
        suffix = "[Y/n]" if default else "[y/N]"
        answer = self._ask(f"{question} {suffix} ")
        if answer is None:
            return self.fallback.confirm(question, default)
        if not answer:
            return default
        return answer.lower() == "y"


# =============================================================================
# Factory
# =============================================================================

def tty_available(tty_path: str = DEFAULT_TTY) -> bool:
    try:
        with open(tty_path, "r"):
            return True
    except OSError:
        return False


def create_decision_provider(
    prompts: Optional[PromptSettings] = None,
    console: Optional[Console] = None,
    interactive: Optional[bool] = None,
) -> DecisionProvider:
    """
    Escolhe o provider adequado.

    Args:
        prompts: Respostas padrão configuradas
        console: Console para as perguntas
        interactive: Força o modo. Se None, detecta (variável de ambiente + /dev/tty)
    """
    prompts = prompts or PromptSettings()
    auto_accept = prompts.auto_accept_non_interactive or bool(os.environ.get("GITHOOKS_AUTO_ACCEPT"))
    fallback = NonInteractiveDecisionProvider(
        auto_accept=auto_accept,
        install_updates=prompts.install_update_non_interactive,
    )

    if interactive is None:
        interactive = not os.environ.get("GITHOOKS_NON_INTERACTIVE") and tty_available()

    if not interactive:
        return fallback

    return TerminalDecisionProvider(console=console, fallback=fallback)


__all__ = [
    "DecisionProvider",
    "NonInteractiveDecisionProvider",
    "TerminalDecisionProvider",
    "create_decision_provider",
    "tty_available",
]
