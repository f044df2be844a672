"""Entry point for `python -m podwatch`.

Runs the monitor with configuration from PODWATCH_* environment variables.
For command-line overrides use the ``podwatch serve`` script instead.
"""

from __future__ import annotations

import asyncio

from podwatch.app import main


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        # Ctrl-C before the signal handlers are installed.
        pass


if __name__ == "__main__":
    run()
