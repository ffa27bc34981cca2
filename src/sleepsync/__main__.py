"""
Main entrypoint.

Usage:
    python -m sleepsync collect     # Oura → sleep table (interactive)
    python -m sleepsync calendar    # sleep table → Google Calendar (interactive)
    python -m sleepsync check       # test all connections
    python -m sleepsync collect --week 25 --yes
"""
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def main() -> None:
    from sleepsync.scripts.run import main as run_main
    sys.exit(run_main())


if __name__ == "__main__":
    main()
