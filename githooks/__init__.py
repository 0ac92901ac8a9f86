"""
🪝 GITHOOKS - Git hooks compartilhados e versionados

Executa os hooks da pasta .githooks de cada repositório, junto com hooks
de repositórios compartilhados, pedindo confirmação para arquivos novos
ou alterados antes de executá-los.
"""

from .__version__ import __version__

__all__ = ["__version__"]
