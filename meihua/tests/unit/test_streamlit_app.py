"""
tests/unit/test_streamlit_app.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for the markup helpers in interfaces/streamlit_app.py.

Importing the page outside `streamlit run` only configures the page in bare
mode; main() is not executed.
"""
from __future__ import annotations

import pytest

from meihua.tests.conftest import make_hexagram

streamlit_app = pytest.importorskip("meihua.interfaces.streamlit_app")


class TestHexagramCard:
    def test_reference_fields_are_escaped(self):
        hexagram = make_hexagram(
            1, '<img src=x onerror="alert(1)">', "111111",
            descriptive_prompt="<script>steal()</script>",
        )
        markup = streamlit_app._hexagram_card_html("Primary hexagram", hexagram, "111111")

        assert "<img" not in markup
        assert "<script>" not in markup
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in markup
        assert "&lt;script&gt;steal()&lt;/script&gt;" in markup

    def test_plain_fields_unchanged(self):
        hexagram = make_hexagram(1, "乾", "111111", classical_text="元亨利贞")
        markup = streamlit_app._hexagram_card_html("Primary hexagram", hexagram, "111111")

        assert '<div class="title">乾</div>' in markup
        assert '<div class="text">元亨利贞</div>' in markup
        assert "#1" in markup
