"""Allow running as `python -m denobundle`."""
import sys

from denobundle.cli import main

sys.exit(main())
