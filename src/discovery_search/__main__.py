"""Allow ``python -m discovery_search``."""

import sys

from discovery_search.cli import main

sys.exit(main())
