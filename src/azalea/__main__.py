"""Entry point for ``python -m azalea``."""

from azalea.cli import main

if __name__ == "__main__":
    main()
