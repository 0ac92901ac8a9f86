"""
GITHOOKS - Trust Evaluator
Decide se o repositório está no modo "confiar em todos os hooks".
"""

import logging
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .config_store import ConfigScope, ConfigStore, KEY_TRUST_ALL
from .models import TrustState

if TYPE_CHECKING:
    from ..prompts.decisions import DecisionProvider


logger = logging.getLogger(__name__)


class TrustEvaluator:
    """
    Estados:
        NO_MARKER  - sem arquivo .githooks/trust-all
        UNSET      - marcador presente, githooks.trust.all não definido
        ACCEPTED   - marcador presente, githooks.trust.all = Y
        DENIED     - marcador presente, githooks.trust.all = N (ou outro valor)
    """

    def __init__(
        self,
        marker_path: Path,
        config: ConfigStore,
        decider: Optional["DecisionProvider"] = None,
    ):
        self.marker_path = Path(marker_path)
        self.config = config
        self.decider = decider

    def state(self) -> TrustState:
        if not self.marker_path.is_file():
            return TrustState.NO_MARKER

        value = self.config.get(KEY_TRUST_ALL, ConfigScope.LOCAL)
        if value is None:
            return TrustState.UNSET
        if value == "Y":
            return TrustState.ACCEPTED
        return TrustState.DENIED

    def is_trusted(self) -> bool:
        """Consulta sem perguntar nada (usado pelo `list`)."""
        return self.state() == TrustState.ACCEPTED

    def resolve(self) -> bool:
        """
        Consulta usada durante a execução dos hooks.

        Com marcador e configuração ainda indefinida, pergunta ao usuário e
        grava a resposta. Sem terminal interativo, não grava nada e segue o
        fluxo por arquivo (ledger).
        """
        state = self.state()
        if state != TrustState.UNSET:
            return state == TrustState.ACCEPTED

        answer = self.decider.trust_repository(self.marker_path.parent.parent) if self.decider else None
        if answer is None:
            logger.debug("Confiança indefinida e sem terminal: usando fluxo por arquivo")
            return False

        self.config.set(KEY_TRUST_ALL, "Y" if answer else "N", ConfigScope.LOCAL)
        return answer

    # =========================================================================
    # Comandos `trust`
    # =========================================================================

    def trust(self) -> bool:
        """Cria o marcador e aceita a confiança."""
        self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        self.marker_path.touch(exist_ok=True)
        return self.config.set(KEY_TRUST_ALL, "Y", ConfigScope.LOCAL)

    def revoke(self) -> bool:
        return self.config.set(KEY_TRUST_ALL, "N", ConfigScope.LOCAL)

    def forget(self) -> Optional[bool]:
        """Remove a configuração. None se não havia nada para esquecer."""
        if self.config.get(KEY_TRUST_ALL, ConfigScope.LOCAL) is None:
            return None
        return self.config.unset(KEY_TRUST_ALL, ConfigScope.LOCAL)

    def delete_marker(self) -> bool:
        """Remove o arquivo marcador. False se ele não existia."""
        if not self.marker_path.exists():
            return False
        self.marker_path.unlink()
        return True


__all__ = ["TrustEvaluator"]
