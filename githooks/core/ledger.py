"""
GITHOOKS - Checksum Ledger
Registro append-only de hooks aceitos e desativados por repositório.
"""

import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Union

from .models import HookState, LedgerRecord, RecordKind


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# Exceções
# =============================================================================

class LedgerWriteError(Exception):
    """Falha ao gravar o arquivo de checksums (permissão, disco, ...)."""
    pass


# =============================================================================
# Checksum
# =============================================================================

def compute_checksum(path: PathLike) -> str:
    """MD5 do conteúdo do arquivo (mesmo formato de `md5sum`)."""
    digest = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _key(path: PathLike) -> str:
    return str(Path(path).absolute())


# =============================================================================
# Ledger
# =============================================================================

class ChecksumLedger:
    """
    Arquivo de checksums de um repositório (padrão: .git/.githooks.checksum).

    Cada linha é um LedgerRecord. Linhas só são acrescentadas, exceto por
    `clear_disabled`, que reescreve o arquivo inteiro sem os marcadores.
    Buscas comparam o caminho absoluto exato.
    """

    def __init__(self, ledger_path: PathLike):
        self.ledger_path = Path(ledger_path)

    # =========================================================================
    # Leitura
    # =========================================================================

    def records(self) -> List[LedgerRecord]:
        """Todos os registros válidos, na ordem do arquivo."""
        try:
            text = self.ledger_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Não foi possível ler %s: %s", self.ledger_path, e)
            return []

        result = []
        for line in text.splitlines():
            record = LedgerRecord.from_line(line)
            if record is not None:
                result.append(record)
        return result

    def records_for(self, path: PathLike) -> List[LedgerRecord]:
        key = _key(path)
        return [r for r in self.records() if r.path == key]

    def is_disabled(self, path: PathLike) -> bool:
        return any(r.kind == RecordKind.DISABLED for r in self.records_for(path))

    def is_accepted(self, path: PathLike, checksum: str) -> bool:
        return any(
            r.kind == RecordKind.ACCEPTED and r.checksum == checksum
            for r in self.records_for(path)
        )

    def classify(self, path: PathLike, checksum: Optional[str] = None) -> HookState:
        """
        Estado do hook segundo o ledger.

        disabled > pending/new (nenhum registro) > pending/changed > active
        """
        records = self.records_for(path)

        if any(r.kind == RecordKind.DISABLED for r in records):
            return HookState.DISABLED

        if not records:
            return HookState.PENDING_NEW

        if checksum is None:
            checksum = compute_checksum(path)

        if any(r.checksum == checksum for r in records):
            return HookState.ACTIVE

        return HookState.PENDING_CHANGED

    # =========================================================================
    # Escrita
    # =========================================================================

    def ensure_exists(self) -> None:
        try:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
            self.ledger_path.touch(exist_ok=True)
        except OSError as e:
            raise LedgerWriteError(f"Não foi possível criar {self.ledger_path}: {e}")

    def record_accepted(self, path: PathLike, checksum: Optional[str] = None) -> LedgerRecord:
        if checksum is None:
            checksum = compute_checksum(path)
        record = LedgerRecord.accepted(_key(path), checksum)
        self._append(record)
        return record

    def record_disabled(self, path: PathLike) -> LedgerRecord:
        record = LedgerRecord.disabled(_key(path))
        self._append(record)
        return record

    def clear_disabled(self, path: PathLike) -> int:
        """
        Remove todos os marcadores de desativação do caminho (ou de qualquer
        arquivo abaixo dele, se for um diretório).

        Returns:
            Número de linhas removidas (0 = arquivo não foi tocado)
        """
        key = _key(path)
        try:
            text = self.ledger_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return 0
        except OSError as e:
            raise LedgerWriteError(f"Não foi possível ler {self.ledger_path}: {e}")

        def matches(line: str) -> bool:
            record = LedgerRecord.from_line(line)
            return record is not None and record.kind == RecordKind.DISABLED and (
                record.path == key or record.path.startswith(key.rstrip("/") + "/")
            )

        # Linhas que não são registros válidos são preservadas como estão
        lines = text.splitlines()
        kept = [line for line in lines if not matches(line)]
        removed = len(lines) - len(kept)
        if removed == 0:
            return 0

        content = "".join(line + "\n" for line in kept)
        tmp_path = self.ledger_path.with_name(self.ledger_path.name + ".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(self.ledger_path)
        except OSError as e:
            raise LedgerWriteError(f"Não foi possível reescrever {self.ledger_path}: {e}")

        logger.debug("%d marcador(es) de desativação removidos para %s", removed, key)
        return removed

    def _append(self, record: LedgerRecord) -> None:
        try:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if self.ledger_path.is_file() and self.ledger_path.stat().st_size > 0:
                with open(self.ledger_path, "rb") as f:
                    f.seek(-1, 2)
                    if f.read(1) != b"\n":
                        prefix = "\n"
            with open(self.ledger_path, "a", encoding="utf-8") as f:
                f.write(prefix + record.to_line() + "\n")
        except OSError as e:
            raise LedgerWriteError(f"Não foi possível gravar em {self.ledger_path}: {e}")


__all__ = [
    "ChecksumLedger",
    "LedgerWriteError",
    "compute_checksum",
]
