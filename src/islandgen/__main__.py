"""Allow running as python -m islandgen."""

import sys

from .cli import main

sys.exit(main())
