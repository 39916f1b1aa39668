"""Allow ``python -m colosseum``."""

import sys

from colosseum.cli.app import main


if __name__ == "__main__":
    sys.exit(main())
