import logging

import streamlit as st
import pandas as pd
import numpy as np
import plotly.express as px
import plotly.graph_objects as go

from components.work_loads.key_generator import KINDS, KeyConfig, KeyGenerator
from components.versioning import build_history, history_frame, summarize
from tries.patricia_trie import PatriciaTrie

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configure page
st.set_page_config(
    page_title="Persistent Trie Explorer",
    page_icon="🌳",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Main title
st.title("🌳 Persistent Patricia Trie Explorer")
st.markdown("---")

# Sidebar
with st.sidebar:
    st.header("Workload")
    kind = st.selectbox("Key kind:", list(KINDS))
    num_keys = st.slider("Number of keys", min_value=1, max_value=500, value=40)
    seed = st.number_input("Seed", min_value=0, value=42, step=1)
    prefix_freq = st.slider("Prefix frequency", min_value=0.0, max_value=0.95, value=0.5)
    casefold = st.checkbox("Case-fold keys", value=False)

    st.markdown("---")
    st.subheader("Quick Actions")
    if st.button("🔄 Rebuild History"):
        st.session_state.pop("history", None)
        st.rerun()

config = (kind, int(num_keys), int(seed), float(prefix_freq), casefold)

# (Re)build the version chain when the workload changes
if st.session_state.get("config") != config or "history" not in st.session_state:
    generator = KeyGenerator(KeyConfig(kind=kind, prefix_freq=float(prefix_freq), seed=int(seed)))
    pairs = generator.pairs(int(num_keys))
    base = PatriciaTrie.empty(str.casefold if casefold else None)
    st.session_state["config"] = config
    st.session_state["pairs"] = pairs
    st.session_state["history"] = build_history(pairs, base=base)
    logger.info("rebuilt history for %s", config)

pairs = st.session_state["pairs"]
history = st.session_state["history"]
df = history_frame(history, pairs)
stats = summarize(df)

# Metrics
col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric("Versions", stats["versions"])

with col2:
    st.metric("Final Nodes", stats["final_nodes"])

with col3:
    st.metric("Fresh Nodes / Bind", f"{stats['mean_fresh']:.2f}")

with col4:
    st.metric("Mean Shared Ratio", f"{stats['mean_shared_ratio']:.1%}")

tab1, tab2, tab3 = st.tabs(["Sharing Charts", "Lookup & Bind", "Tree"])

with tab1:
    if df.empty:
        st.info("No versions yet")
    else:
        st.subheader("Node allocation per version")
        fig = go.Figure()
        fig.add_trace(go.Bar(x=df["version"], y=df["shared"], name="Shared"))
        fig.add_trace(go.Bar(x=df["version"], y=df["fresh"], name="Fresh"))
        fig.update_layout(barmode="stack", xaxis_title="Version", yaxis_title="Nodes")
        st.plotly_chart(fig, use_container_width=True)

        fig_ratio = px.line(df, x="version", y="shared_ratio", title="Shared node ratio")
        st.plotly_chart(fig_ratio, use_container_width=True)

        st.subheader("History")
        st.dataframe(df, use_container_width=True)

with tab2:
    version = st.slider("Version", min_value=0, max_value=len(history) - 1, value=len(history) - 1)
    trie = history[version]

    st.subheader("Lookup")
    query = st.text_input("Key to look up")
    if query:
        if query in trie:
            st.success(f"✅ {query!r} => {trie.lookup(query)!r}")
        else:
            st.warning(f"⚠️ {query!r} is not bound in version {version}")

    st.subheader("Bind")
    new_key = st.text_input("New key")
    new_value = st.text_input("Value")
    if st.button("Bind into latest version"):
        st.session_state["pairs"] = pairs + [(new_key, new_value)]
        st.session_state["history"] = history + [history[-1].bind(new_key, new_value)]
        st.rerun()

    with st.expander("Keys bound so far"):
        keys_df = pd.DataFrame(pairs[:version], columns=["key", "value"])
        keys_df["length"] = np.fromiter((len(k) for k in keys_df["key"]), dtype=int, count=len(keys_df))
        st.dataframe(keys_df)

with tab3:
    st.write(f"**Nodes:** {trie.count_nodes()}  |  "
             f"**Avg branch factor:** {trie.count_nodes(get_avg_branch_factor=True):.2f}")
    st.code(trie.render(), language="text")

# Footer
st.markdown("---")
st.markdown(
    """
    <div style='text-align: center; color: #B0B0B0; padding: 1rem;'>
        Built with Streamlit 🚀 | Persistent Patricia Trie Explorer
    </div>
    """,
    unsafe_allow_html=True
)
