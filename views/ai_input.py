"""
AI match entry: free text in, pre-filled match form out.

The extractor reply is untrusted, so it always goes through `normalize_draft`
before the form sees it; nothing is saved from this view.
"""

import streamlit as st

from common.errors import ExtractionError, ValidationError
from common.navigation import AIDataExtracted, CancelAuthoring
from common.utils import get_gemini_settings
from controllers.ai_controller import MatchExtractor
from models.match_model import normalize_draft
from views.context import AppContext


@st.cache_resource(show_spinner=False)
def _extractor(api_key: str, model_name: str) -> MatchExtractor:
    return MatchExtractor(api_key, model_name)


def render(ctx: AppContext) -> None:
    st.header("✨ AI match entry")
    st.caption("Describe the match in your own words; the form will be pre-filled for review.")

    text = st.text_area(
        "Match description",
        key="ai_text",
        height=160,
        placeholder="e.g. Beat Yongsan FC 3-1 at Mapo Stadium on 2024-05-04, Kim scored twice and Lee once, 14 players came.",
    )
    go, cancel = st.columns(2)
    if cancel.button("Cancel", use_container_width=True):
        ctx.go(CancelAuthoring())
    if not go.button("Analyse", type="primary", use_container_width=True):
        return

    api_key, model_name = get_gemini_settings()
    try:
        with st.spinner("Analysing..."):
            payload = _extractor(api_key, model_name).extract(text)
    except ValidationError as exc:
        st.error(" ".join(exc.messages))
        return
    except ValueError:
        st.error("The AI service is not configured (missing API key).")
        return
    except ExtractionError as exc:
        st.error(f"{exc} Please try again in a moment.")
        return

    ctx.go(AIDataExtracted(normalize_draft(payload)))
