"""
Persistent map contract.

A persistent map never changes in place: `bind` returns a new map and leaves
the receiver untouched, so every earlier version stays valid. Implementations
provide the three core operations; the convenience methods below are derived
from them and need not be overridden.
"""


class PersistentMap:
  __slots__ = ()

  # Core API.

  @classmethod
  def empty(cls, normalize=None):
    raise NotImplementedError()

  def bind(self, key, value):
    raise NotImplementedError()

  def lookup(self, key):
    raise NotImplementedError()

  # Convenience methods.

  def get(self, key, default=None):
    """Like `lookup`, but return `default` when the key is not bound."""
    try:
      return self.lookup(key)
    except KeyError:
      return default

  def __contains__(self, key):
    try:
      self.lookup(key)
      return True
    except KeyError:
      return False

  def bind_many(self, items):
    """Bind every `(key, value)` pair in order; later duplicates win."""
    if hasattr(items, "items"):
      items = items.items()
    result = self
    for key, value in items:
      result = result.bind(key, value)
    return result

  def __iter__(self):
    raise NotImplementedError('Cannot iterate over a persistent map, '
      'use lookup() or get() for individual keys.')
