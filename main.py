"""Process Entry Point - Root Module.

This is the root-level entry point for running the monitor
(python main.py). It imports from the src package.
"""

from src.main import main

__all__ = [
    "main",
]


if __name__ == "__main__":
    main()
