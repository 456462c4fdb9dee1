#!/usr/bin/env python3
"""TomatoClock entry point.

Run with:
    python main.py
    python -m tomatoclock
"""

from tomatoclock.__main__ import main


if __name__ == "__main__":
    main()
