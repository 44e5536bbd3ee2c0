"""Main entry point when executing composecli as a package.

This allows running the package using python -m composecli.
"""

from composecli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
