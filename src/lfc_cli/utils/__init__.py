"""Utility modules for latex-fast-compile."""

from .console import (
    _rich_error,
    _rich_warning,
    _rich_info,
    _rich_echo,
    _get_console,
    delimit
)
from .reporter import Reporter

__all__ = [
    '_rich_error',
    '_rich_warning',
    '_rich_info',
    '_rich_echo',
    '_get_console',
    'delimit',
    'Reporter'
]
