"""Allow running the renderer with ``python -m rayweekend``."""

import sys

from rayweekend.cli import main

if __name__ == "__main__":
    sys.exit(main())
