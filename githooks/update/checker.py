"""
GITHOOKS - Update Checker
Verificação de novas versões (no máximo uma vez por intervalo, após post-commit).

A fonte é o JSON do pacote no índice (`info.version`) ou um script de
instalação com linha `# Version:`.
"""

import json
import logging
import re
import subprocess
import sys
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from rich.console import Console

from ..__version__ import __version__
from ..core.config_store import (
    ConfigScope,
    ConfigStore,
    KEY_AUTOUPDATE_ENABLED,
    KEY_AUTOUPDATE_LASTRUN,
    KEY_SINGLE_INSTALL,
    is_yes,
)
from ..core.formatters import emit
from ..core.models import UpdateSettings

if TYPE_CHECKING:
    from ..prompts.decisions import DecisionProvider


logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^# Version: (.+)$", re.MULTILINE)
UPDATE_TRIGGER = "post-commit"


# =============================================================================
# Exceções
# =============================================================================

class UpdateFetchError(Exception):
    """Não foi possível baixar a descrição da versão mais recente."""
    pass


# =============================================================================
# Versões
# =============================================================================

def is_script(text: str) -> bool:
    return (text or "").startswith("#!")


def read_version(text: str) -> Optional[str]:
    """
    Token de versão da descrição baixada: `info.version` do JSON do índice
    de pacotes, ou a primeira linha `# Version: ...` de um script.
    """
    text = text or ""
    if text.lstrip().startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            return None
        info = data.get("info") if isinstance(data, dict) else None
        version = info.get("version") if isinstance(info, dict) else None
        if not isinstance(version, str) or not version.strip():
            return None
        return version.strip()

    match = VERSION_PATTERN.search(text)
    if not match:
        return None
    return match.group(1).strip()


def lexicographic_newer(current: str, latest: str) -> bool:
    return current < latest


def numeric_newer(current: str, latest: str) -> bool:
    """Compara os grupos de dígitos (1808.241831 < 1810.1). Sem dígitos, compara como texto."""
    current_parts = [int(n) for n in re.findall(r"\d+", current)]
    latest_parts = [int(n) for n in re.findall(r"\d+", latest)]
    if not current_parts or not latest_parts:
        return lexicographic_newer(current, latest)
    return current_parts < latest_parts


COMPARATORS: Dict[str, Callable[[str, str], bool]] = {
    "lexicographic": lexicographic_newer,
    "numeric": numeric_newer,
}


def fetch_descriptor(url: str, timeout: float = 30) -> str:
    """
    Baixa a descrição da versão mais recente (JSON do índice ou script).

    Raises:
        UpdateFetchError: Em qualquer falha de rede/HTTP
    """
    req = urllib.request.Request(url, headers={"User-Agent": f"githooks/{__version__}"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        raise UpdateFetchError(f"HTTP {e.code} {e.reason}")
    except urllib.error.URLError as e:
        raise UpdateFetchError(str(e.reason))
    except (OSError, ValueError) as e:
        raise UpdateFetchError(str(e))


def run_command(args: List[str]) -> int:
    return subprocess.run(args, check=False).returncode


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class UpdateCheckResult:
    """Resultado de uma verificação de atualização."""
    current: str
    latest: Optional[str] = None
    available: bool = False
    installed: bool = False


# =============================================================================
# Checker
# =============================================================================

class UpdateChecker:
    """
    Verificação automática (após post-commit, no máximo uma vez por dia) e
    manual (`git hooks update`).
    """

    def __init__(
        self,
        config: ConfigStore,
        settings: Optional[UpdateSettings] = None,
        decider: Optional["DecisionProvider"] = None,
        console: Optional[Console] = None,
        current_version: str = __version__,
        fetcher: Callable[[str, float], str] = fetch_descriptor,
        runner: Callable[[List[str]], int] = run_command,
        clock: Callable[[], float] = time.time,
        python: str = sys.executable,
    ):
        self.config = config
        self.settings = settings or UpdateSettings()
        self.decider = decider
        self.console = console or Console(highlight=False)
        self.current_version = current_version
        self.fetcher = fetcher
        self.runner = runner
        self.clock = clock
        self.python = python or "python"

    @property
    def is_newer(self) -> Callable[[str, str], bool]:
        return COMPARATORS[self.settings.comparator]

    # =========================================================================
    # Estado
    # =========================================================================

    def is_enabled(self) -> bool:
        return is_yes(self.config.get(KEY_AUTOUPDATE_ENABLED))

    def enable(self) -> bool:
        return self.config.set(KEY_AUTOUPDATE_ENABLED, "Y", ConfigScope.GLOBAL)

    def disable(self) -> bool:
        return self.config.set(KEY_AUTOUPDATE_ENABLED, "N", ConfigScope.GLOBAL)

    def is_single_install(self) -> bool:
        return (self.config.get(KEY_SINGLE_INSTALL, ConfigScope.LOCAL) or "") == "yes"

    def last_run(self) -> int:
        value = self.config.get(KEY_AUTOUPDATE_LASTRUN, ConfigScope.GLOBAL)
        try:
            return int(value) if value else 0
        except ValueError:
            logger.debug("Valor inválido em %s: %r", KEY_AUTOUPDATE_LASTRUN, value)
            return 0

    def record_run(self) -> None:
        self.config.set(KEY_AUTOUPDATE_LASTRUN, str(int(self.clock())), ConfigScope.GLOBAL)

    def should_check(self) -> bool:
        if not self.is_enabled():
            return False
        return self.clock() - self.last_run() >= self.settings.interval_seconds

    # =========================================================================
    # Verificação
    # =========================================================================

    def fetch_latest(self) -> str:
        emit(self.console, "^ Verificando atualizações ...")
        return self.fetcher(self.settings.url, self.settings.timeout_seconds)

    def check_for_updates(self, trigger: str) -> Optional[UpdateCheckResult]:
        """
        Verificação automática. Só roda no post-commit, com atualizações
        automáticas ativas e passado o intervalo desde a última verificação.
        Falhas de rede viram avisos.
        """
        if trigger != UPDATE_TRIGGER or not self.should_check():
            return None

        self.record_run()

        try:
            descriptor = self.fetch_latest()
        except UpdateFetchError as e:
            emit(self.console, f"! Falha ao verificar atualizações: {e}")
            return None

        result = self._compare(descriptor)
        if not result.available:
            return result

        install = self.decider.install_update(result.latest) if self.decider else False
        if install:
            result.installed = self.execute(descriptor, result.latest)

        if not result.installed:
            self.print_disable_info()
        return result

    def run_manual(self, force: bool = False) -> UpdateCheckResult:
        """
        `git hooks update [force]`: instala sem perguntar se houver versão
        nova (ou sempre, com force).

        Raises:
            UpdateFetchError: Se o download falhar
        """
        self.record_run()
        descriptor = self.fetch_latest()
        result = self._compare(descriptor)

        if not result.available and not force:
            emit(self.console, "  O Githooks já está na versão mais recente")
            return result

        result.installed = self.execute(descriptor, result.latest)
        return result

    def _compare(self, descriptor: str) -> UpdateCheckResult:
        latest = read_version(descriptor)
        result = UpdateCheckResult(current=self.current_version, latest=latest)
        if latest is None:
            logger.warning("Descrição de atualização sem versão")
            return result
        result.available = self.is_newer(self.current_version, latest)
        logger.debug("Versão atual %s, última %s, disponível=%s", self.current_version, latest, result.available)
        return result

    def install_commands(self, descriptor: str, latest: Optional[str] = None) -> List[List[str]]:
        """
        Comandos da atualização, com --single no modo de repositório único.

        Um script baixado é executado diretamente. Para o JSON do índice, o
        pacote é atualizado com pip e o `githooks install` da nova versão
        reinstala os hooks.
        """
        single = ["--single"] if self.is_single_install() else []
        if is_script(descriptor):
            return [["sh", "-c", descriptor, "--"] + single]

        package = self.settings.package
        requirement = f"{package}=={latest}" if latest else package
        return [
            [self.python, "-m", "pip", "install", "--upgrade", requirement],
            [self.python, "-m", "githooks", "install", "--non-interactive"] + single,
        ]

    def execute(self, descriptor: str, latest: Optional[str] = None) -> bool:
        """Executa os comandos da atualização, parando no primeiro que falhar."""
        for args in self.install_commands(descriptor, latest):
            logger.debug("Executando comando de atualização: %s", args[0])
            try:
                returncode = self.runner(args)
            except OSError as e:
                logger.warning("Não foi possível executar a atualização: %s", e)
                return False

            if returncode != 0:
                emit(self.console, "! A atualização falhou")
                return False
        return True

    def print_disable_info(self) -> None:
        scope = "" if self.is_single_install() else " --global"
        emit(self.console, "  Se quiser desativar as verificações automáticas de atualização, execute:")
        emit(self.console, f"    git config{scope} githooks.autoupdate.enabled N")


__all__ = [
    "COMPARATORS",
    "UpdateCheckResult",
    "UpdateChecker",
    "UpdateFetchError",
    "fetch_descriptor",
    "is_script",
    "lexicographic_newer",
    "numeric_newer",
    "read_version",
]
