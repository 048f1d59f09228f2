"""Entry point for the plansmith CLI.

Usage:
    python -m plansmith.interfaces.cli.main

Or via installed entry point:
    plansmith <command>
"""

from plansmith.interfaces.cli import app


def main() -> None:
    """Run the plansmith CLI application."""
    app()


if __name__ == "__main__":
    main()
