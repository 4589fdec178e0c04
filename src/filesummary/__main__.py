"""Allow `python -m filesummary`."""

import sys

from filesummary.cli import main

sys.exit(main())
