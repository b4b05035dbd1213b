"""Allow running picoleaf as ``python -m picoleaf``."""

from .cli import main

if __name__ == "__main__":
    main()
