"""Core modules for GITHOOKS engine."""

from .engine import HookExecutionEngine
from .formatters import FormatterFactory
from .ledger import ChecksumLedger, LedgerWriteError, compute_checksum
from .ignore import IgnoreFilter
from .models import (
    Decision,
    GithooksSettings,
    HookFile,
    HookOutcome,
    HookSource,
    HookState,
    InvocationResult,
    LedgerRecord,
    SharedRepo,
)
from .resolver import HookNotFoundError, HookResolver
from .settings_loader import SettingsLoadError, load_default_settings, load_settings
from .trust import TrustEvaluator

__all__ = [
    # Engine
    "HookExecutionEngine",
    # Formatters
    "FormatterFactory",
    # Componentes
    "ChecksumLedger",
    "IgnoreFilter",
    "HookResolver",
    "TrustEvaluator",
    "compute_checksum",
    # Models
    "Decision",
    "GithooksSettings",
    "HookFile",
    "HookOutcome",
    "HookSource",
    "HookState",
    "InvocationResult",
    "LedgerRecord",
    "SharedRepo",
    # Erros
    "HookNotFoundError",
    "LedgerWriteError",
    "SettingsLoadError",
    # Loaders
    "load_default_settings",
    "load_settings",
]
