# test_versioning.py
# Version history & structural sharing checks for components/versioning.py.

import sys
import os

# Add parent directory to Python path so we can import from tries/components
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

try:
    from tries.patricia_trie import PatriciaTrie
    from components.versioning import (COLUMNS, build_history, node_reuse,
                                       history_frame, summarize)
except Exception as e:
    print("[FAIL] Could not import components.versioning")
    print("       Import error:", repr(e))
    sys.exit(1)

# ------------------------------------------------------------------------------
# Tiny test harness
# ------------------------------------------------------------------------------
PASS = 0
FAIL = 0
RAISE_ON_FAIL = True


def check(name: str, condition: bool, detail: str = ""):
    global PASS, FAIL
    if condition:
        PASS += 1
        print(f"[PASS] {name}")
        return
    FAIL += 1
    print(f"[FAIL] {name} :: {detail}")
    if RAISE_ON_FAIL:
        raise AssertionError(f"{name} :: {detail}")


def section(title: str):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


PAIRS = [("test", 0), ("slow", 1), ("water", 2), ("slower", 3),
         ("tester", 4), ("te", 5), ("toast", 6), ("toad", 7)]


# ------------------------------------------------------------------------------
# Tests
# ------------------------------------------------------------------------------
def test_build_history():
    section("TEST: build_history")
    history = build_history(PAIRS)
    check("one version per pair plus empty", len(history) == len(PAIRS) + 1)
    check("v0 is empty", not history[0])
    for n, t in enumerate(history):
        ok = all(t.lookup(k) == v for k, v in PAIRS[:n])
        check(f"v{n} holds its prefix of pairs", ok)

    base = PatriciaTrie.empty(str.casefold).bind("ROOT", -1)
    history = build_history([("Key", 1)], base=base)
    check("base kept as v0", history[0] is base)
    check("base normalize inherited", history[1].lookup("KEY") == 1)
    check("base keys survive", history[1].lookup("root") == -1)


def test_node_reuse():
    section("TEST: node_reuse")
    t1 = PatriciaTrie.empty().bind_many(PAIRS)
    t2 = t1.bind("walrus", 8)
    fresh, shared = node_reuse(t1, t2)
    # new root, new "wa" branch, moved "ter", new "lrus" leaf
    check("fresh nodes on path", fresh == 4, f"Got {fresh}")
    check("counts add up", fresh + shared == t2.count_nodes())
    check("identical versions share all", node_reuse(t1, t1) == (0, t1.count_nodes()))
    empty = PatriciaTrie.empty()
    check("from empty all fresh", node_reuse(empty, t1) == (t1.count_nodes(), 0))


def test_history_frame_and_summary():
    section("TEST: history_frame & summarize")
    history = build_history(PAIRS)
    df = history_frame(history, PAIRS)
    check("columns", list(df.columns) == COLUMNS, f"Got {list(df.columns)}")
    check("one row per bind", len(df) == len(PAIRS))
    check("keys in order", list(df["key"]) == [k for k, _ in PAIRS])
    check("final nodes", int(df["nodes"].iloc[-1]) == history[-1].count_nodes())
    check("first bind all fresh", int(df["fresh"].iloc[0]) == 1 and df["shared"].iloc[0] == 0)
    check("ratio in range", bool(((df["shared_ratio"] >= 0) & (df["shared_ratio"] <= 1)).all()))

    stats = summarize(df)
    check("versions", stats["versions"] == len(PAIRS))
    check("final_nodes", stats["final_nodes"] == history[-1].count_nodes())
    check("mean_fresh", abs(stats["mean_fresh"] - df["fresh"].mean()) < 1e-9)

    empty_stats = summarize(history_frame(build_history([]), []))
    check("empty summary", empty_stats["versions"] == 0 and empty_stats["final_nodes"] == 0)

    try:
        history_frame(history, PAIRS[:-1])
    except ValueError:
        check("mismatched lengths rejected", True)
    else:
        check("mismatched lengths rejected", False, "Expected ValueError")


if __name__ == "__main__":
    RAISE_ON_FAIL = False
    test_build_history()
    test_node_reuse()
    test_history_frame_and_summary()

    print("\n" + "-" * 70)
    print(f"RESULTS: PASS={PASS}  FAIL={FAIL}")
    print("-" * 70)
    if FAIL > 0:
        sys.exit(1)
