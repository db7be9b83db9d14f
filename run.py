# -*- coding: utf-8 -*-

"""
Main entry point for running pagefold from a source checkout.
"""

import sys

from pagefold.cli import main

if __name__ == '__main__':
    sys.exit(main())
