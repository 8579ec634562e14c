#!/usr/bin/env python3
"""
TV Catalog - Main Entry Point
Runs the command line interface from a source checkout
"""

import os
import sys


def main():
    """Main application entry point"""
    # Add src directory to path
    src_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src')
    sys.path.insert(0, src_path)

    from tvcatalog.cli import run
    sys.exit(run())


if __name__ == "__main__":
    main()
