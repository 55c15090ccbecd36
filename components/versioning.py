"""
Version history and structural sharing of persistent tries.

Every `bind` produces a new version that reuses most of the previous one. The
helpers here keep the whole chain of versions alive and measure how many nodes
each step allocated versus shared, which is what the explorer dashboard plots.
"""
import logging

import numpy as np
import pandas as pd

from tries.patricia_trie import PatriciaTrie, walk_nodes

logger = logging.getLogger(__name__)

COLUMNS = ["version", "key", "nodes", "fresh", "shared", "shared_ratio"]


def build_history(pairs, base=None):
  """Return `[v0, v1, ..., vn]` where `v_k` binds the first k pairs into `base`."""
  history = [base if base is not None else PatriciaTrie.empty()]
  for key, value in pairs:
    history.append(history[-1].bind(key, value))
  logger.info("built %d versions, final trie has %d nodes",
    len(history) - 1, history[-1].count_nodes())
  return history


def node_reuse(old, new):
  """Return `(fresh, shared)` node counts of `new` relative to `old`.

  A node is shared when the very same object is reachable from `old`.
  """
  seen = {id(node) for node in walk_nodes(old)}
  fresh = 0
  shared = 0
  for node in walk_nodes(new):
    if id(node) in seen:
      shared += 1
    else:
      fresh += 1
  return fresh, shared


def history_frame(history, pairs):
  """One row per version >= 1 with node counts and reuse against its parent."""
  pairs = list(pairs)
  if len(history) != len(pairs) + 1:
    raise ValueError(
      f"history has {len(history)} versions for {len(pairs)} pairs; expected {len(pairs) + 1}")
  rows = []
  for version in range(1, len(history)):
    fresh, shared = node_reuse(history[version - 1], history[version])
    total = fresh + shared
    rows.append({
      "version": version,
      "key": pairs[version - 1][0],
      "nodes": total,
      "fresh": fresh,
      "shared": shared,
      "shared_ratio": shared / total if total else 0.0,
    })
  return pd.DataFrame(rows, columns=COLUMNS)


def summarize(frame):
  """Aggregate statistics over a `history_frame`."""
  if frame.empty:
    return {"versions": 0, "mean_fresh": 0.0, "mean_shared_ratio": 0.0, "final_nodes": 0}
  fresh = frame["fresh"].to_numpy(dtype=float)
  ratio = frame["shared_ratio"].to_numpy(dtype=float)
  return {
    "versions": int(len(frame)),
    "mean_fresh": float(np.mean(fresh)),
    "mean_shared_ratio": float(np.mean(ratio)),
    "final_nodes": int(frame["nodes"].iloc[-1]),
  }
