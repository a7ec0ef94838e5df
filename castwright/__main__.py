"""Module entrypoint for running Castwright as ``python -m castwright``."""

from __future__ import annotations

from castwright.cli import main


if __name__ == "__main__":
    main()
