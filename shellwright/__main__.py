"""Module entrypoint for running shellwright as ``python -m shellwright``."""

from __future__ import annotations

from shellwright.cli import main


if __name__ == "__main__":
    main()
