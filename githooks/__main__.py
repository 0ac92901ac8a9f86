"""Permite executar `python -m githooks` (usado pelos templates instalados)."""

from .cli import main

if __name__ == "__main__":
    main()
