"""
Colors Utility Module

Terminal color support for the generator's progress output, with automatic
detection of terminal capabilities.
"""

import os
import sys


def _supports_color() -> bool:
    """Check if the terminal supports ANSI color codes."""
    # FORCE_COLOR overrides all detection (check first)
    if 'FORCE_COLOR' in os.environ:
        return True

    # NO_COLOR environment variable (standard convention)
    if 'NO_COLOR' in os.environ:
        return False

    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False

    if os.environ.get('TERM', '') == 'dumb':
        return False

    return True


class Colors:
    """
    ANSI color codes - automatically disabled on unsupported terminals.

    Usage:
        from contract_catalog.colors import Colors
        print(f"{Colors.GREEN}Generated!{Colors.RESET}")
    """
    _enabled = _supports_color()

    RESET = "\033[0m" if _enabled else ""

    # Styles
    BOLD = "\033[1m" if _enabled else ""
    DIM = "\033[2m" if _enabled else ""

    # Colors
    RED = "\033[31m" if _enabled else ""
    GREEN = "\033[32m" if _enabled else ""
    YELLOW = "\033[33m" if _enabled else ""
    BLUE = "\033[34m" if _enabled else ""
    MAGENTA = "\033[35m" if _enabled else ""
    CYAN = "\033[36m" if _enabled else ""

    @classmethod
    def is_enabled(cls) -> bool:
        """Check if color output is enabled."""
        return cls._enabled

    @classmethod
    def outcome_color(cls, outcome: str) -> str:
        """Get color for a per-file outcome."""
        colors = {
            'ok': cls.GREEN,
            'fallback': cls.YELLOW,
            'skipped': cls.DIM,
            'failed': cls.RED,
        }
        return colors.get(outcome, cls.RESET)

    @classmethod
    def kind_color(cls, kind: str) -> str:
        """Get color for a contract kind."""
        colors = {
            'api': cls.GREEN,
            'event': cls.YELLOW,
            'data': cls.MAGENTA,
        }
        return colors.get(kind, cls.RESET)

    @classmethod
    def format_outcome(cls, outcome: str) -> str:
        """Format an outcome marker with color."""
        markers = {'ok': '✓', 'fallback': '⚠', 'skipped': '-', 'failed': '✗'}
        return f"{cls.outcome_color(outcome)}{markers.get(outcome, '?')}{cls.RESET}"

    @classmethod
    def format_kind(cls, kind: str) -> str:
        """Format a contract kind label with color."""
        labels = {'api': 'API', 'event': 'Event', 'data': 'Data'}
        return f"{cls.kind_color(kind)}{labels.get(kind, kind)}{cls.RESET}"


# Convenience functions
def outcome_str(outcome: str) -> str:
    """Format outcome with color (shorthand)."""
    return Colors.format_outcome(outcome)


def kind_str(kind: str) -> str:
    """Format contract kind with color (shorthand)."""
    return Colors.format_kind(kind)


def colorize(text: str, color: str) -> str:
    """Apply a color to text if colors are enabled."""
    if Colors._enabled:
        return f"{color}{text}{Colors.RESET}"
    return text
