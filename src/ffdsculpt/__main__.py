"""Main entry point for running ffdsculpt as a module."""

import sys

if __name__ == "__main__":
    from ffdsculpt.cli.app import main
    sys.exit(main())
