"""Entry point for running voicerelay as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the voicerelay CLI application."""
    app()


if __name__ == "__main__":
    main()
