#!/usr/bin/env python3
"""
CLI package for the quota status bar.

This package provides command-line interface components including
argument parsing, the console host and main application flow.
"""

from .parser import (
    create_argument_parser,
)

from .console import (
    ConsoleHost,
)

from .main import (
    main,
    run_once,
    run_watch,
)

__all__ = [
    # Argument parsing
    "create_argument_parser",
    # Console host
    "ConsoleHost",
    # Main application flow
    "main",
    "run_once",
    "run_watch",
]
