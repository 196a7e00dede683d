"""
In-memory cache of parsed syntax trees.

Entries are keyed by (normalized path, content hash) so a file that changes
without its mtime changing (copies, containers) still invalidates correctly.
Entries expire after a TTL and the oldest-created entry is evicted when the
cache is full. Nothing is persisted across processes.
"""

import hashlib
import logging
import os
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """One cached parse result"""
    key: str
    ast: Any
    created_at: float


class ASTCache:
    """Content-addressed, TTL-bounded, size-bounded parse cache."""

    def __init__(self, ttl: float = 3600.0, max_size: int = 100, enabled: bool = True,
                 clock: Optional[Callable[[], float]] = None):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.ttl = ttl
        self.max_size = max_size
        self.enabled = enabled
        self.clock = clock or time.monotonic
        self.logger = logging.getLogger("ASTCache")

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def normalize_path(file_path: str) -> str:
        return os.path.normpath(os.path.abspath(file_path))

    def key_for(self, file_path: str, content: str) -> str:
        normalized = self.normalize_path(file_path)
        digest = hashlib.sha256()
        digest.update(normalized.encode('utf-8'))
        digest.update(b'\0')
        digest.update(content.encode('utf-8'))
        safe_path = re.sub(r'[^A-Za-z0-9]', '_', normalized)
        return f"{safe_path}_{digest.hexdigest()[:16]}"

    def get(self, file_path: str, content: str) -> Optional[Any]:
        if not self.enabled:
            return None
        key = self.key_for(file_path, content)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not isinstance(entry, CacheEntry):
                # Unreadable entry: drop it and fall through to a miss
                self.logger.debug(f"CORRUPTED: {file_path}, removing")
                del self._entries[key]
                entry = None
            if entry is not None:
                if self.clock() - entry.created_at < self.ttl:
                    self.hits += 1
                    self.logger.debug(f"HIT: {file_path} ({self.hits}/{self.hits + self.misses})")
                    return entry.ast
                del self._entries[key]
                self.logger.debug(f"EXPIRED: {file_path}")
            self.misses += 1
            self.logger.debug(f"MISS: {file_path} ({self.hits}/{self.hits + self.misses})")
            return None

    def set(self, file_path: str, content: str, ast: Any) -> None:
        if not self.enabled:
            return
        key = self.key_for(file_path, content)
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_size:
                evicted_key, _ = self._entries.popitem(last=False)
                self.logger.debug(f"EVICTED (max size): {evicted_key}")
            self._entries[key] = CacheEntry(key=key, ast=ast, created_at=self.clock())
            self.logger.debug(f"STORE: {file_path}")

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self.hits = 0
            self.misses = 0
        self.logger.debug(f"CLEARED: {count} entries")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses
        hit_rate = f"{self.hits / lookups * 100:.1f}%" if lookups else "0%"
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": hit_rate,
            "size": len(self._entries),
            "enabled": self.enabled,
        }


__all__ = ['ASTCache', 'CacheEntry']
