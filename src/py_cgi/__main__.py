"""Allow ``python -m py_cgi``."""

import sys

from py_cgi.cli import main

sys.exit(main())
