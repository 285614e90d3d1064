"""Allow ``python -m lumina``."""

from lumina import cli

if __name__ == "__main__":
    cli.app()
