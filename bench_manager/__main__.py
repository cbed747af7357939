"""Entry point for the bench CLI."""

import sys


def main() -> int:
    """Main entry point."""
    from bench_manager.cli.commands import cli_main
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
