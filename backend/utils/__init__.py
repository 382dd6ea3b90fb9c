"""
Utility modules for the backend.
"""
from .normalize import (
    is_missing,
    or_empty,
    to_text,
    to_number,
    to_list,
)

__all__ = [
    'is_missing',
    'or_empty',
    'to_text',
    'to_number',
    'to_list',
]
