"""Per-user conversation context with bounded memory.

Each owner gets a small context object (the ids shown by their last /list, so
commands can refer to list positions). The registry keeps at most
`max_entries` owners, evicting the least recently used, and forgets owners
idle for longer than `ttl_seconds`.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class ConversationContext:
    """Transient state for one owner."""
    owner: str
    listed_ids: list[str] = field(default_factory=list)
    last_seen: float = 0.0

    def resolve(self, reference: str) -> Optional[str]:
        """Map a 1-based list position to the id shown at that position."""
        if not reference.isdigit():
            return None
        position = int(reference)
        if 1 <= position <= len(self.listed_ids):
            return self.listed_ids[position - 1]
        return None


class ContextRegistry:
    """LRU + TTL registry of ConversationContext keyed by owner."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._contexts: OrderedDict[str, ConversationContext] = OrderedDict()

    def _expired(self, context: ConversationContext, now: float) -> bool:
        return now - context.last_seen > self.ttl_seconds

    def get(self, owner: str) -> ConversationContext:
        """Get (or start) the context for an owner and mark it as used."""
        now = self.clock()
        context = self._contexts.get(owner)

        if context is None or self._expired(context, now):
            context = ConversationContext(owner=owner)
            self._contexts[owner] = context

        context.last_seen = now
        self._contexts.move_to_end(owner)

        # Remove the least recently used owners if the registry is full
        while len(self._contexts) > self.max_entries:
            self._contexts.popitem(last=False)

        return context

    def peek(self, owner: str) -> Optional[ConversationContext]:
        """Return a live context without touching its recency."""
        context = self._contexts.get(owner)
        if context is None or self._expired(context, self.clock()):
            return None
        return context

    def discard(self, owner: str) -> None:
        self._contexts.pop(owner, None)

    def purge_expired(self) -> int:
        """Drop every context idle past the TTL. Returns how many were removed."""
        now = self.clock()
        expired = [owner for owner, ctx in self._contexts.items() if self._expired(ctx, now)]
        for owner in expired:
            del self._contexts[owner]
        return len(expired)

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, owner: str) -> bool:
        return self.peek(owner) is not None
