"""
Persistent Patricia trie (compressed, immutable, structurally shared).

This module implements a Patricia trie for string keys in which **no node is
ever modified after it is built**. Every `bind` returns a new trie; only the
nodes along the touched path are allocated again and everything else is shared
by reference with the version it was derived from. Old versions therefore stay
valid forever and may be read from any thread without locking.

Key features
------------
- **Compressed paths**
  - Chains of single-child nodes are folded into one node holding a
    multi-character `fragment`, so depth is bounded by the number of branch
    points rather than the key length.
- **Copy-on-write updates**
  - Re-building an ancestor copies its `children` dict once (a shallow copy:
    sibling subtrees are the same objects) and replaces exactly one slot.
- **Iterative traversals**
  - `bind`, `lookup`, `count_nodes`, `render` and `walk_nodes` use explicit
    stacks (no recursion), avoiding recursion limits on long keys.
- **Normalization-aware**
  - A trie may carry a `normalize` callable (e.g. `str.casefold`) applied to
    every key at the API boundary; derived versions inherit it.

Classes
-------
PatriciaNode
    Internal node. Holds `fragment`, `value` (or the `NO_VALUE` sentinel) and
    `children` (None for leaves, else dict `first_char -> PatriciaNode`).
PatriciaTrie
    Public, persistent map API: `empty`, `bind`, `lookup`, `bind_many`,
    `count_nodes`, `render`.

Conventions & invariants
------------------------
- **Edge invariant:** children are keyed by the first character of their
  fragment, so no two siblings share a first character.
- **Non-empty fragments:** only the root may carry `fragment == ""`, either as a
  synthetic branch point or because the empty key is bound there.
- **Immutability:** nodes and their `children` dicts are never mutated once a
  node is constructed. Callers must not mutate them either.
- **Not found:** an empty trie, a diverging key, and a key that ends on a
  branch node without a value all raise `TrieKeyError`.
"""

import logging

from tries.map_interface import PersistentMap

logger = logging.getLogger(__name__)


class TrieKeyError(KeyError):
  """Raised by `lookup` when no value is bound to the key."""

  def __init__(self, key):
    super().__init__(key)
    self.key = key


class TrieInvariantError(RuntimeError):
  """Internal structure is inconsistent; unreachable in correct use."""


class _NoValue:
  __slots__ = ()

  def __repr__(self):
    return "NO_VALUE"


# Marks branch nodes; distinct from None so that None is a storable value.
NO_VALUE = _NoValue()


class PatriciaNode:
  __slots__ = ("fragment", "value", "children")

  def __init__(self, fragment, value=NO_VALUE, children=None):
    self.fragment = fragment
    self.value = value
    self.children = children

  def has_value(self):
    return self.value is not NO_VALUE

  def _get(self, ch):
    """Return the child whose fragment starts with ch, or None."""
    c = self.children
    if c is None:
      return None
    return c.get(ch)

  def _degree(self):
    c = self.children
    return 0 if not c else len(c)

  def __repr__(self):
    return "PatriciaNode(%r, %r, %d children)" % (
      self.fragment, self.value, self._degree())


def _lcp(a, b):
  """Return the length of the Longest Common Prefix between a and b."""
  i = 0
  n = min(len(a), len(b))
  while i < n and a[i] == b[i]:
    i += 1
  return i


def _graft(parent, ch, child):
  """Return a copy of `parent` whose child slot `ch` now holds `child`.

  The copy shares `fragment`, `value` and every other child with `parent`.
  """
  if parent is None:
    raise TrieInvariantError(f"cannot graft child {ch!r} onto an empty trie")
  children = dict(parent.children) if parent.children else {}
  children[ch] = child
  return PatriciaNode(parent.fragment, parent.value, children)


def _bind_node(root, key, value):
  """Insert `key` below `root` and return the new root node.

  - Descends while the current fragment is a full prefix of the remaining key,
    recording `(parent, slot)` frames.
  - At the stopping node applies one of: value update (exact match), new leaf
    (no child for the next character), split with the key as the new parent
    (key is a prefix of the fragment) or split at the common prefix into a
    value-less branch node (the two diverge).
  - Re-creates the recorded ancestors bottom-up with `_graft`.
  """
  if root is None:
    return PatriciaNode(key, value)

  frames = []
  node = root
  rem = key
  while True:
    frag = node.fragment
    i = _lcp(rem, frag)

    if i == len(frag):
      if i == len(rem):
        new = PatriciaNode(frag, value, node.children)
        break
      rem = rem[i:]
      child = node._get(rem[0])
      if child is None:
        new = _graft(node, rem[0], PatriciaNode(rem, value))
        break
      frames.append((node, rem[0]))
      node = child
      continue

    # Split: the old node keeps its value/children under the fragment's tail.
    tail = frag[i:]
    moved = PatriciaNode(tail, node.value, node.children)
    if i == len(rem):
      new = PatriciaNode(rem, value, {tail[0]: moved})
    else:
      new = PatriciaNode(rem[:i], NO_VALUE, {
        tail[0]: moved,
        rem[i]: PatriciaNode(rem[i:], value),
      })
    if logger.isEnabledFor(logging.DEBUG):
      logger.debug("split %r at %d while binding %r", frag, i, key)
    break

  while frames:
    parent, ch = frames.pop()
    new = _graft(parent, ch, new)
  return new


def _lookup_node(root, key):
  """Return the node whose path spells `key` exactly, or None."""
  node = root
  rem = key
  while node is not None:
    frag = node.fragment
    if not rem.startswith(frag):
      return None
    rem = rem[len(frag):]
    if not rem:
      return node
    node = node._get(rem[0])
  return None


def walk_nodes(trie):
  """Yield every node of `trie` (iterative DFS, children sorted by character)."""
  root = trie.root if isinstance(trie, PatriciaTrie) else trie
  if root is None:
    return
  stack = [root]
  while stack:
    node = stack.pop()
    yield node
    if node.children:
      for ch in sorted(node.children, reverse=True):
        stack.append(node.children[ch])


#### ===================================================  ####
#    Persistent Patricia Trie
#### ===================================================  ####

class PatriciaTrie(PersistentMap):
  __slots__ = ("root", "normalize")

  def __init__(self, root=None, normalize=None):
    self.root = root
    self.normalize = normalize

  @classmethod
  def empty(cls, normalize=None):
    """Return the empty trie (no root node)."""
    return cls(None, normalize)

  def _key(self, key):
    if not isinstance(key, str):
      raise TypeError(f"trie keys must be str, not {type(key).__name__}")
    if self.normalize is not None:
      key = self.normalize(key)
    return key

  def bind(self, key, value):
    """Return a new trie in which `key` maps to `value`.

    The receiver is left untouched. Nodes off the path of `key` are shared
    with the receiver; the result is never empty.

    Args:
        key (str): Key to bind; may be "".
        value: Any object, None included.

    Returns:
        PatriciaTrie: The new version.

    Complexity:
        O(L + d·c), where L = len(key), d = nodes on the path and c = their
        fan-out (each ancestor's children dict is copied once).
    """
    key = self._key(key)
    return PatriciaTrie(_bind_node(self.root, key, value), self.normalize)

  def lookup(self, key):
    """Return the value bound to `key`.

    Raises:
        TrieKeyError: The trie is empty, the key leaves the stored paths, or
            it ends on a branch node that holds no value.
    """
    norm = self._key(key)
    node = _lookup_node(self.root, norm)
    if node is None or node.value is NO_VALUE:
      raise TrieKeyError(key)
    return node.value

  def _prepare_batch(self, items, presorted=False):
    """Normalize keys once and collapse duplicates (last value wins).

    Returns
    -------
    list[tuple[str, object]]
        Pairs in sorted key order, or in first-seen order when `presorted`.
    """
    if hasattr(items, "items"):
      items = items.items()
    merged = {}
    for key, value in items:
      merged[self._key(key)] = value
    if presorted:
      return list(merged.items())
    return sorted(merged.items(), key=lambda kv: kv[0])

  def bind_many(self, items, *, presorted=False):
    """Bind many `(key, value)` pairs and return a single new trie.

    Equivalent to calling `bind` for each pair in order; when a key repeats,
    its last value wins. Intermediate roots are never exposed, so the nodes
    they would have shared are simply collected.
    """
    root = self.root
    for key, value in self._prepare_batch(items, presorted):
      root = _bind_node(root, key, value)
    return PatriciaTrie(root, self.normalize)

  def count_nodes(self, get_avg_branch_factor=False):
    """Return total node count, or average branching factor over internal nodes."""
    total_nodes = 0
    internal = 0
    total_deg = 0
    for node in walk_nodes(self):
      total_nodes += 1
      deg = node._degree()
      if deg > 0:
        total_deg += deg
        internal += 1
    if get_avg_branch_factor:
      return (total_deg / internal) if internal else 0.0
    return total_nodes

  def render(self):
    """Draw the trie as an ASCII tree, one node per line."""
    if self.root is None:
      return "()\n"
    lines = []
    stack = [(self.root, "", True)]
    while stack:
      node, indent, last = stack.pop()
      if last:
        line = indent + "\\-"
        indent = indent + "  "
      else:
        line = indent + "|-"
        indent = indent + "| "
      line += node.fragment
      if node.value is not NO_VALUE:
        line += " => (%s)" % (node.value,)
      lines.append(line)
      if node.children:
        keys = sorted(node.children)
        for n, ch in enumerate(reversed(keys)):
          stack.append((node.children[ch], indent, n == 0))
    return "\n".join(lines) + "\n"

  def __bool__(self):
    return self.root is not None

  def __str__(self):
    return self.render()

  def __repr__(self):
    if self.root is None:
      return "PatriciaTrie.empty()"
    return "PatriciaTrie(%r)" % (self.root,)


def empty(normalize=None):
  return PatriciaTrie.empty(normalize)
