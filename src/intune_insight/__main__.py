"""
Entry point for running intune_insight as a module.

This file enables:
- `python -m intune_insight SNAPSHOT`
- `uv run python -m intune_insight SNAPSHOT`
"""

from __future__ import annotations

from intune_insight import main

if __name__ == "__main__":
    main()
