"""Run Releasebox with ``python -m releasebox``."""

import sys

from releasebox.cli import main


if __name__ == "__main__":
    sys.exit(main())
