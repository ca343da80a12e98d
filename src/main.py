"""Entry point for Notion Feature Docs.

Delegates to the Click command group, which loads configuration and
sets up logging for each command.
"""

from src.cli.commands import docs


def main() -> None:
    """Launch the CLI."""
    docs()


if __name__ == "__main__":
    main()
