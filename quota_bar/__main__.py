#!/usr/bin/env python3
"""
Enable execution of the quota_bar package as a module.

This allows running the package with: python -m quota_bar
"""

from .cli.main import main

if __name__ == "__main__":
    main()
