"""Allow ``python -m dataset_generator``."""

import sys

from .cli import main

sys.exit(main())
