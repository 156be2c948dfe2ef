"""
Entry point for ``python -m synthetic_mixtures``.
"""

from .cli import main

if __name__ == "__main__":
    main()
