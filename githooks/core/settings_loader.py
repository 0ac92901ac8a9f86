"""
GITHOOKS - Settings Loader
Carrega e valida a configuração YAML (padrão do pacote + override do usuário).
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional, Union
import yaml

from ..config import DEFAULT_SETTINGS_FILE
from .models import (
    GithooksSettings,
    PathSettings,
    UpdateSettings,
    SharedSettings,
    PromptSettings,
)


# =============================================================================
# Exceções Customizadas
# =============================================================================

class SettingsLoadError(Exception):
    """Erro ao carregar arquivo de configuração."""
    pass


# =============================================================================
# Loader Principal
# =============================================================================

SECTIONS = {
    "paths": PathSettings,
    "update": UpdateSettings,
    "shared": SharedSettings,
    "prompts": PromptSettings,
}

TOP_LEVEL_KEYS = {"version", "managed_hooks", *SECTIONS.keys()}


class SettingsLoader:
    """
    Carrega a configuração do GITHOOKS.

    Responsabilidades:
    - Ler arquivos YAML
    - Mesclar override do usuário sobre os padrões do pacote
    - Converter para objetos tipados (GithooksSettings)
    """

    def read_file(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Lê um arquivo YAML de configuração.

        Raises:
            SettingsLoadError: Se não conseguir ler ou parsear o arquivo
        """
        filepath = Path(filepath)

        if not filepath.is_file():
            raise SettingsLoadError(f"Arquivo não encontrado: {filepath}")

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsLoadError(f"Erro ao parsear YAML em {filepath}: {e}")
        except OSError as e:
            raise SettingsLoadError(f"Erro ao ler arquivo {filepath}: {e}")

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise SettingsLoadError(f"{filepath}: YAML deve conter um objeto no nível raiz")

        return data

    def load(
        self,
        defaults_file: Union[str, Path] = DEFAULT_SETTINGS_FILE,
        override_file: Optional[Union[str, Path]] = None,
    ) -> GithooksSettings:
        """
        Carrega os padrões e aplica o override (se houver).

        Args:
            defaults_file: YAML com a configuração padrão
            override_file: YAML opcional do usuário

        Returns:
            GithooksSettings validado
        """
        data = self.read_file(defaults_file)
        sources = [str(defaults_file)]

        if override_file is not None:
            data = merge_settings(data, self.read_file(override_file))
            sources.append(str(override_file))

        settings = self.load_from_dict(data)
        settings.metadata["sources"] = sources
        return settings

    def load_from_dict(self, data: Dict[str, Any]) -> GithooksSettings:
        """Converte um dicionário (já parseado do YAML) em GithooksSettings."""
        unknown = set(data.keys()) - TOP_LEVEL_KEYS
        if unknown:
            raise SettingsLoadError(f"Chaves desconhecidas na configuração: {sorted(unknown)}")

        managed_hooks = data.get("managed_hooks", [])
        if not isinstance(managed_hooks, list) or not all(isinstance(h, str) for h in managed_hooks):
            raise SettingsLoadError("'managed_hooks' deve ser uma lista de nomes de hooks")

        sections = {}
        for name, section_cls in SECTIONS.items():
            section_data = data.get(name) or {}
            if not isinstance(section_data, dict):
                raise SettingsLoadError(f"Seção '{name}' deve ser um objeto")
            try:
                sections[name] = section_cls(**section_data)
            except TypeError as e:
                raise SettingsLoadError(f"Seção '{name}' inválida: {e}")
            except ValueError as e:
                raise SettingsLoadError(str(e))

        return GithooksSettings(
            version=str(data.get("version", "1.0")),
            managed_hooks=list(managed_hooks),
            **sections,
        )


# =============================================================================
# Helper Functions
# =============================================================================

def merge_settings(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Mescla dois dicionários de configuração (override vence, recursivo)."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_override_file() -> Optional[Path]:
    """Localiza o arquivo de override: $GITHOOKS_SETTINGS ou ~/.githooks/settings.yaml."""
    env_path = os.environ.get("GITHOOKS_SETTINGS")
    if env_path:
        return Path(env_path).expanduser()

    user_file = Path("~/.githooks/settings.yaml").expanduser()
    if user_file.is_file():
        return user_file

    return None


def load_settings(override_file: Optional[Union[str, Path]] = None) -> GithooksSettings:
    """
    Helper para carregar a configuração efetiva.

    Args:
        override_file: Override explícito (default: detecta automaticamente)
    """
    if override_file is None:
        override_file = find_override_file()
    return SettingsLoader().load(override_file=override_file)


def load_default_settings() -> GithooksSettings:
    """Carrega apenas a configuração padrão do pacote."""
    return SettingsLoader().load()


__all__ = [
    "SettingsLoader",
    "SettingsLoadError",
    "merge_settings",
    "find_override_file",
    "load_settings",
    "load_default_settings",
]
