"""Allow ``python -m clarity``."""

import sys

from clarity.main import main

if __name__ == "__main__":
    sys.exit(main())
