"""Arranque de `bootapp` desde un checkout, sin `pip install -e .`.

Uso: `python main.py ls`, `python main.py cert list`, etc.

Añade `src/` al path (ahí viven `core`, `adapters` y `cli`) y delega en la
misma función que el script `bootapp` instalado.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
