"""
GITHOOKS - Hook Status
Classificação dos hooks para exibição (`git hooks list`).

Precedência: ignored > active / trusted > estado do ledger.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .ignore import IgnoreFilter
from .ledger import ChecksumLedger
from .models import HookFile, HookSource, HookState, SharedRepo
from .resolver import HookGroup, HookResolver
from .trust import TrustEvaluator


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ListedHook:
    """Uma linha da listagem."""
    hook: HookFile
    state: HookState
    single_file: bool = False

    @property
    def label(self) -> str:
        """Ex: `lint (pending / new / shared:global)` ou `pre-commit (file / active)`."""
        parts = []
        if self.hook.source == HookSource.LEGACY:
            parts.extend([HookSource.LEGACY.value, "file"])
        elif self.single_file:
            parts.append("file")
        parts.append(self.state.value)
        if self.hook.source in (HookSource.SHARED_GLOBAL, HookSource.SHARED_LOCAL):
            parts.append(self.hook.source.value)
        return f"{self.hook.name} ({' / '.join(parts)})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.hook.name,
            "path": str(self.hook.path),
            "source": self.hook.source.value,
            "state": self.state.value,
            "file": self.single_file,
        }


@dataclass
class TriggerListing:
    """Hooks encontrados para um trigger."""
    trigger: str
    hooks: List[ListedHook] = field(default_factory=list)
    requested: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trigger": self.trigger,
            "hooks": [h.to_dict() for h in self.hooks],
        }


# =============================================================================
# Status Service
# =============================================================================

class HookStatusService:
    """Classifica arquivos de hook sem executar nem perguntar nada."""

    def __init__(
        self,
        resolver: HookResolver,
        ignore_filter: IgnoreFilter,
        trust: TrustEvaluator,
        ledger: ChecksumLedger,
    ):
        self.resolver = resolver
        self.ignore_filter = ignore_filter
        self.trust = trust
        self.ledger = ledger

    def state_of(self, hook: HookFile, ignore_filter: Optional[IgnoreFilter] = None) -> HookState:
        ignore_filter = ignore_filter or self.ignore_filter
        if ignore_filter.is_ignored(hook.path, hook.trigger):
            return HookState.IGNORED
        if self.trust.is_trusted():
            return HookState.TRUSTED
        return self.ledger.classify(hook.path)

    def _list_group(self, group: HookGroup) -> List[ListedHook]:
        ignore_filter = self.ignore_filter
        if group.source != HookSource.LOCAL:
            ignore_filter = ignore_filter.with_root(group.root)
        return [
            ListedHook(hook=hook, state=self.state_of(hook, ignore_filter), single_file=group.single_file)
            for hook in group.files
        ]

    def list_trigger(
        self,
        trigger: str,
        hook_folder: Optional[Path] = None,
        global_repos: Sequence[SharedRepo] = (),
        local_repos: Sequence[SharedRepo] = (),
        cache_dir: Optional[Path] = None,
    ) -> TriggerListing:
        """Legado, compartilhados globais, compartilhados locais e locais, nessa ordem."""
        listing = TriggerListing(trigger=trigger)

        if hook_folder is not None:
            legacy = self.resolver.legacy_hook(trigger, hook_folder)
            if legacy is not None:
                listing.hooks.append(ListedHook(hook=legacy, state=self.state_of(legacy), single_file=True))

        if cache_dir is not None:
            for repos in (global_repos, local_repos):
                for group in self.resolver.shared_hooks(repos, cache_dir, trigger):
                    listing.hooks.extend(self._list_group(group))

        local = self.resolver.local_hooks(trigger)
        if local is not None:
            listing.hooks.extend(self._list_group(local))

        return listing


__all__ = ["HookStatusService", "ListedHook", "TriggerListing"]
