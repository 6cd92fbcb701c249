"""Device assignment resolution and Settings Catalog conflict analysis for Intune."""

from __future__ import annotations

from typing import Sequence

__version__ = "0.1.0"


def main(argv: Sequence[str] | None = None) -> None:
    from intune_insight.cli import main as cli_main

    cli_main(argv)


__all__ = ["__version__", "main"]
