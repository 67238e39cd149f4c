"""Allow ``python -m kube_warmer``."""

import sys

from kube_warmer.cli import main

if __name__ == "__main__":
    sys.exit(main())
