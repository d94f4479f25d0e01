"""
Main entry point for running the package as a module.

Usage:
    python -m derivgen --input photos/ --output site/assets/
    python -m derivgen -i photos/ -o site/assets/ --workers 4
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
