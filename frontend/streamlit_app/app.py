import os

import pandas as pd
import requests
import streamlit as st

API = os.getenv("API_URL", "http://localhost:8000/api/v1")
TIMEOUT = 120

st.set_page_config(page_title="LexSQL", layout="wide")
st.title("LexSQL: ask your legal prompts")

state = st.session_state
for key, default in {"question": "", "sql": None, "rows": None, "chart": None, "explanations": None}.items():
    state.setdefault(key, default)


def api_post(path: str, payload: dict):
    r = requests.post(f"{API}{path}", json=payload, timeout=TIMEOUT)
    if not r.ok:
        detail = r.json().get("detail", r.text) if r.headers.get("content-type", "").startswith("application/json") else r.text
        raise RuntimeError(detail if isinstance(detail, str) else str(detail))
    return r.json()


@st.cache_data(ttl=3600, show_spinner=False)
def load_suggestions() -> list[str]:
    try:
        return requests.get(f"{API}/query/suggestions", timeout=10).json()
    except requests.RequestException:
        return []


def ask(question: str) -> bool:
    with st.spinner("Generating SQL and fetching results..."):
        try:
            result = api_post("/query", {"question": question})
        except (requests.RequestException, RuntimeError) as e:
            # keep whatever was shown before
            st.toast(f"Query failed: {e}")
            return False
    state.question = question
    state.sql = result["sql"]
    state.rows = result["rows"]
    state.chart = result.get("chart")
    state.explanations = None
    if result.get("chart_error"):
        st.toast(f"Chart skipped: {result['chart_error']}")
    return True


def reset():
    for key in ("sql", "rows", "chart", "explanations"):
        state[key] = None
    state.question = ""


def render_chart(rows: list[dict], config: dict):
    df = pd.DataFrame(rows)
    x, ys = config["xKey"], [y for y in config["yKeys"] if y in df.columns]
    if x not in df.columns or not ys:
        st.info("The suggested chart does not match the result columns.")
        return
    for y in ys:
        df[y] = pd.to_numeric(df[y], errors="coerce")
    colors = [config["colors"][y] for y in ys]
    kind = config.get("type", "bar")
    if kind == "line":
        st.line_chart(df, x=x, y=ys, color=colors)
    elif kind == "area":
        st.area_chart(df, x=x, y=ys, color=colors)
    else:
        # pie has no native streamlit chart, fall back to bars
        st.bar_chart(df, x=x, y=ys, color=colors)


with st.form("ask"):
    question = st.text_input("Ask a question about the legal prompts", value=state.question)
    submitted = st.form_submit_button("Ask", type="primary")
if submitted and question.strip():
    ask(question.strip())

suggestions = load_suggestions()
if state.rows is None and suggestions:
    st.caption("Try one of these:")
    cols = st.columns(3)
    for i, suggestion in enumerate(suggestions):
        if cols[i % 3].button(suggestion, key=f"suggestion-{i}", use_container_width=True):
            if ask(suggestion):
                st.rerun()

if state.sql:
    st.code(state.sql, language="sql")
    c1, c2 = st.columns([1, 1])
    if c1.button("Explain this query"):
        try:
            state.explanations = api_post("/query/explain", {"question": state.question, "sql": state.sql})["explanations"]
        except (requests.RequestException, RuntimeError) as e:
            st.toast(f"Explanation failed: {e}")
    if c2.button("Clear"):
        reset()
        st.rerun()

if state.explanations:
    with st.expander("Query explanation", expanded=True):
        for item in state.explanations:
            st.markdown(f"`{item['section']}`  {item['explanation']}")

if state.rows is not None:
    if not state.rows:
        st.info("No results.")
    else:
        table_tab, chart_tab = st.tabs(["Table", "Chart"])
        with table_tab:
            st.dataframe(state.rows, use_container_width=True)
        with chart_tab:
            if state.chart:
                render_chart(state.rows, state.chart)
            else:
                st.info("No chart available for this result.")
