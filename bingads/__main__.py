"""Main entry point when executing bingads as a package.

This allows running the package using python -m bingads.
"""

from bingads.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
