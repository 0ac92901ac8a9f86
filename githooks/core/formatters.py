"""
GITHOOKS - Output Formatters
Formatação da listagem de hooks (terminal, JSON) e saída de mensagens.
"""

import json
from typing import List, Optional

from rich.console import Console

from .status import TriggerListing


# =============================================================================
# Console helpers
# =============================================================================

def emit(console: Console, message: str, style: Optional[str] = None, end: str = "\n") -> None:
    """
    Imprime uma mensagem ao usuário.

    Sem markup e sem quebra de linha automática: caminhos e colchetes
    (ex: `[Y/a/n/d]`) saem exatamente como escritos.
    """
    console.print(message, style=style, end=end, markup=False, emoji=False, highlight=False, soft_wrap=True)


# =============================================================================
# Base Formatter
# =============================================================================

class BaseFormatter:
    """Classe base para formatters da listagem."""

    def format_listings(self, listings: List[TriggerListing]) -> str:
        raise NotImplementedError


# =============================================================================
# Console Formatter (Default)
# =============================================================================

class ConsoleFormatter(BaseFormatter):
    """
    Formato do terminal:

        > pre-commit
          - lint (active)
          - format (pending / new)
    """

    EMPTY_MESSAGE = "  Nenhum hook ativo encontrado"

    def format_listings(self, listings: List[TriggerListing]) -> str:
        lines = []
        for listing in listings:
            if not listing.hooks and not listing.requested:
                continue
            lines.append(f"> {listing.trigger}")
            if not listing.hooks:
                lines.append(self.EMPTY_MESSAGE)
            for item in listing.hooks:
                lines.append(f"  - {item.label}")

        if not lines:
            return "* Nenhum hook ativo encontrado no repositório"
        return "\n".join(lines)


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(BaseFormatter):
    """Formato JSON (para scripts e integrações)."""

    def __init__(self, pretty: bool = True):
        self.pretty = pretty

    def format_listings(self, listings: List[TriggerListing]) -> str:
        data = [listing.to_dict() for listing in listings if listing.hooks or listing.requested]
        if self.pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)


# =============================================================================
# Formatter Factory
# =============================================================================

class FormatterFactory:
    """Factory para criar formatters."""

    @staticmethod
    def create(format_type: str, pretty: bool = True) -> BaseFormatter:
        format_type = format_type.lower()

        if format_type == "console":
            return ConsoleFormatter()

        elif format_type == "json":
            return JSONFormatter(pretty=pretty)

        else:
            raise ValueError(
                f"Formato desconhecido: {format_type}. "
                f"Formatos válidos: console, json"
            )


__all__ = [
    "emit",
    "BaseFormatter",
    "ConsoleFormatter",
    "JSONFormatter",
    "FormatterFactory",
]
