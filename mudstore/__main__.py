#!/usr/bin/env python3
"""
mudstore - Main Entry Point

Run with: python -m mudstore [COMMAND] [OPTIONS]
"""

from .cli import main

if __name__ == "__main__":
    main()
