"""
Package entry point.

Allows running the application via:

    python -m yomtovcheck

This simply forwards execution to yomtovcheck.cli.main().
"""

from yomtovcheck.cli import main

if __name__ == "__main__":
    main()
