"""
Main entry point for running the package as a module.

Usage:
    python -m gallery list
    python -m gallery export -a ALBUM_ID -o album.zip
    python -m gallery thumbnails --dry-run
    python -m gallery orphans --delete
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
