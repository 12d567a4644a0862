"""Console output formatting utilities for the job builder CLI."""

from __future__ import annotations

import json
import sys
from typing import Any, Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_server_started(self, version: str, host: str, port: int, nomad_addr: str) -> None:
        """Print service start information."""
        print("\nJOB BUILDER STARTED")
        print(f"Version: {version}")
        print(f"Listening: {host}:{port}")
        print(f"Nomad: {nomad_addr}")
        print()

    def print_json(self, data: Any) -> None:
        """Print a document as indented JSON."""
        print(json.dumps(data, indent=2, sort_keys=True))

    def print_submitted(self, api: str, status: int) -> None:
        print(f"\nSuccessfully submitted build request to {api}")
        print(f"Status: {status}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
