import sys

from ftpweb.cli import main

sys.exit(main())
