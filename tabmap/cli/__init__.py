"""Command line interface: ``python -m tabmap.cli`` or the ``tabmap`` console script."""

from .main import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main

__all__ = [
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
    "main",
]
