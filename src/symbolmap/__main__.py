"""Console-script entry point for :mod:`symbolmap`."""

from __future__ import annotations

from symbolmap.cli import create_app


def main() -> None:
    """Execute the CLI application.

    Example:
        >>> from symbolmap.__main__ import main
        >>> main()  # doctest: +SKIP
    """

    app = create_app()
    app(prog_name="symbolmap")


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()


__all__ = ["main"]
