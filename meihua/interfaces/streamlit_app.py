"""
interfaces/streamlit_app.py
──────────────────────────────────────────────────────────────────────────────
Streamlit calculator page for Plum Blossom numerology.

Run:
  streamlit run meihua/interfaces/streamlit_app.py

Features:
  • Three number inputs (lower trigram / upper trigram / changing line)
  • Summary sentence with a copy-ready code block
  • Primary / secondary hexagram and changing-line cards
  • Calculation details table, JSON tab, CSV download
  • Sidebar: summary language, reload reference data
"""
from __future__ import annotations

import html
import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# ── Path setup ─────────────────────────────────────────────────────────────
# Allow running from the repo root with: streamlit run meihua/interfaces/streamlit_app.py
_REPO_ROOT = Path(__file__).parent.parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from meihua.domain.exceptions import InvalidInput, MeihuaError
from meihua.domain.models import DerivationResult, Hexagram
from meihua.services.container import get_resolver, refresh_resolver
from meihua.services.formatter import SUPPORTED_LOCALES, ResultFormatter

logger = logging.getLogger(__name__)

# ── Page configuration ─────────────────────────────────────────────────────
st.set_page_config(
    page_title="梅花易数 Calculator",
    page_icon="☯",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── CSS ────────────────────────────────────────────────────────────────────
st.markdown(
    """
    <style>
    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #2b1a12 0%, #5c3a1a 100%);
    }
    [data-testid="stSidebar"] * { color: #fdf3e7 !important; }

    .stApp { background-color: #faf7f2; }

    .gua-card {
        background: white;
        border-left: 5px solid #b45309;
        border-radius: 6px;
        padding: 14px 18px;
        margin-bottom: 12px;
        box-shadow: 0 1px 4px rgba(0,0,0,0.08);
    }
    .gua-card .label { font-size: 0.78em; color: #78716c; }
    .gua-card .title { font-size: 1.3em; font-weight: 600; color: #1c1917; }
    .gua-card .code  { font-family: monospace; color: #57534e; }
    .gua-card .text  { font-size: 0.87em; color: #44403c; margin-top: 6px; }
    </style>
    """,
    unsafe_allow_html=True,
)


# ── Backend singleton ──────────────────────────────────────────────────────

@st.cache_resource(show_spinner="Loading hexagram reference data…")
def _load_resolver():
    """Loads and caches the DivinationResolver for the lifetime of the app."""
    return get_resolver()


# ── Sidebar ────────────────────────────────────────────────────────────────

def _render_sidebar() -> dict:
    with st.sidebar:
        st.markdown("## ⚙️ Options")
        st.markdown("---")
        locale = st.selectbox("Summary language", SUPPORTED_LOCALES, key="locale")
        if st.button("Reload reference data"):
            refresh_resolver()
            _load_resolver.clear()
            st.success("Reference data will be reloaded.")
        st.markdown("---")
        resolver = _load_resolver()
        st.markdown(
            f"<small>Hexagrams: {len(resolver.knowledge_base)} · "
            f"Lines: {len(resolver.knowledge_base.lines)}</small>",
            unsafe_allow_html=True,
        )
    return {"locale": locale}


# ── Result rendering ───────────────────────────────────────────────────────

def _hexagram_card_html(label: str, hexagram: Hexagram, code: str) -> str:
    """Card markup; reference-data fields are escaped before interpolation."""
    text = hexagram.classical_text or hexagram.descriptive_prompt
    return f"""
        <div class="gua-card">
            <div class="label">{html.escape(label)} &nbsp;·&nbsp; #{hexagram.ordinal_position}</div>
            <div class="title">{html.escape(hexagram.name)}</div>
            <div class="code">{html.escape(code)}</div>
            <div class="text">{html.escape(text)}</div>
        </div>
        """


def _hexagram_card(label: str, hexagram: Hexagram, code: str) -> None:
    st.markdown(_hexagram_card_html(label, hexagram, code), unsafe_allow_html=True)


def _details_df(result: DerivationResult) -> pd.DataFrame:
    lower, upper = result.lower_trigram, result.upper_trigram
    return pd.DataFrame(
        [
            {"Step": "Lower trigram", "Input": result.input_numbers[0],
             "Remainder": result.lower_remainder,
             "Bits": lower.bits, "Symbol": f"{lower.name} {lower.pinyin}"},
            {"Step": "Upper trigram", "Input": result.input_numbers[1],
             "Remainder": result.upper_remainder,
             "Bits": upper.bits, "Symbol": f"{upper.name} {upper.pinyin}"},
            {"Step": "Changing line", "Input": result.input_numbers[2],
             "Remainder": result.line_remainder,
             "Bits": f"{result.primary_code} → {result.secondary_code}",
             "Symbol": result.changing_line.name},
        ]
    )


def _render_result(result: DerivationResult, formatter: ResultFormatter) -> None:
    summary = formatter.summary(result)
    st.success(summary)
    st.code(summary, language=None)

    col1, col2 = st.columns(2)
    with col1:
        _hexagram_card("Primary hexagram", result.primary_hexagram, result.primary_code)
    with col2:
        _hexagram_card("Secondary hexagram", result.secondary_hexagram, result.secondary_code)

    line = result.changing_line
    st.markdown(f"**Changing line:** {line.name} (line {line.line_position})")
    if line.descriptive_prompt:
        st.caption(line.descriptive_prompt)
    if result.all_changing_line is not None:
        st.caption(f"All lines changing: {result.all_changing_line.name}")

    tab_table, tab_json = st.tabs(["📋 Calculation", "{ } JSON"])
    with tab_table:
        df = _details_df(result)
        st.dataframe(df, use_container_width=True)
        st.download_button(
            "⬇ Download CSV",
            df.to_csv(index=False).encode(),
            file_name="derivation.csv",
            mime="text/csv",
        )
    with tab_json:
        st.json(result.to_dict())


# ── Main ───────────────────────────────────────────────────────────────────

def main() -> None:
    st.title("☯ 梅花易数 Calculator")
    st.caption("Three numbers → primary hexagram, secondary hexagram, changing line.")

    options = _render_sidebar()

    c1, c2, c3 = st.columns(3)
    n1 = c1.number_input("First number (lower trigram, mod 8)", min_value=1, value=1, step=1)
    n2 = c2.number_input("Second number (upper trigram, mod 8)", min_value=1, value=1, step=1)
    n3 = c3.number_input("Third number (changing line, mod 6)", min_value=1, value=1, step=1)

    if not st.button("Calculate", type="primary"):
        st.info("Enter three positive numbers and press **Calculate**.")
        return

    resolver = _load_resolver()
    formatter = ResultFormatter(options["locale"])
    try:
        result = resolver.derive(int(n1), int(n2), int(n3))
    except InvalidInput as exc:
        st.error(str(exc))
        return
    except MeihuaError as exc:
        logger.exception("Derivation failed")
        st.error(f"Reference data problem: {exc}")
        return

    st.markdown("---")
    _render_result(result, formatter)


if __name__ == "__main__":
    main()
