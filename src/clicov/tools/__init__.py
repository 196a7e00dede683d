"""
Utility tools for source analysis
"""

from .source_reader import SourceReader, FileResult
from .ast_cache import ASTCache, CacheEntry
from .ast_parsing import JavaScriptParser

__all__ = [
    'SourceReader',
    'FileResult',
    'ASTCache',
    'CacheEntry',
    'JavaScriptParser',
]
