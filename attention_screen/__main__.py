from __future__ import annotations

from .app import run
from .logging_config import configure_logging


def main() -> int:
    """Entry point for running the screening game from the command line."""
    configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
