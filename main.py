"""CLI entry-point for running the FTP web gateway."""
from __future__ import annotations

import sys

from ftpweb.cli import main

if __name__ == "__main__":
    sys.exit(main())
