"""Entry point for running gitsparse as a module.

This module allows gitsparse to be run as a Python module using the -m flag:
    python -m gitsparse
"""

from . import cli

if __name__ == "__main__":
    cli._main()
