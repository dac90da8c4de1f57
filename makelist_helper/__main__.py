"""Module entrypoint for ``python -m makelist_helper``."""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
