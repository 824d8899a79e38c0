# File: modelts/__main__.py
"""
modelts - Module entry point.

Allows running the generator directly via::

    python -m modelts -m app.models -o models.ts

This module simply delegates to the CLI entry point defined in ``modelts.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from modelts.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
