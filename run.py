"""Entry point for the godojo content pipeline."""

import sys

from godojo_content.cli import main

if __name__ == "__main__":
    sys.exit(main())
