"""Allow ``python -m spectre``."""

from spectre.cli import main

if __name__ == "__main__":
    main()
