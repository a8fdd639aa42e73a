"""Module entrypoint: python -m balancing"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
