"""Module entrypoint for running chatvoice as ``python -m chatvoice``."""

from __future__ import annotations

from chatvoice.cli import main


if __name__ == "__main__":
    main()
