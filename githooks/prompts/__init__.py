"""Decisões do usuário (terminal interativo ou respostas padrão)."""

from .decisions import (
    DecisionProvider,
    NonInteractiveDecisionProvider,
    TerminalDecisionProvider,
    create_decision_provider,
)

__all__ = [
    "DecisionProvider",
    "NonInteractiveDecisionProvider",
    "TerminalDecisionProvider",
    "create_decision_provider",
]
