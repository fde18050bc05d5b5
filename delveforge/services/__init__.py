"""
Services package for Delveforge.

Provides reference library loading.
"""

from .library_loader import LibraryLoader, default_library_path, get_library

__all__ = [
    'LibraryLoader',
    'default_library_path',
    'get_library',
]
