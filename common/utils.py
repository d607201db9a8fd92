"""
Common utility functions used by multiple views and controllers.

This module contains:
    - configuration readers (`get_admin_secret`, `get_gemini_settings`) that
        prefer `st.secrets` and fall back to environment variables loaded by
        `python-dotenv`,
    - `configure_logging` for the one-time logging setup done by `main.py`,
    - `current_page_url` to learn the address the browser is on, which the
        navigator needs for its same-origin guard,
    - `safe_rerun` which works on old and new Streamlit versions.
"""

# Import libraries
from __future__ import annotations
import logging
import os
from typing import Tuple

import streamlit as st

DEFAULT_PAGE_URL = "http://localhost:8501/"


def _secret(section: str, key: str):
    try:
        if section in st.secrets and key in st.secrets[section]:
            return st.secrets[section][key]
    except Exception:
        # no secrets.toml configured
        pass
    return None


def get_admin_secret() -> str:
    return str(_secret("auth", "password") or os.getenv("ADMIN_PASSWORD", "1234"))


def get_gemini_settings() -> Tuple[str, str]:
    api_key = _secret("gemini", "api_key") or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    model = _secret("gemini", "model") or os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    return str(api_key), str(model)


def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def current_page_url() -> str:
    """Best-effort URL of the page the browser shows (without query string)."""
    ctx = getattr(st, "context", None)
    url = getattr(ctx, "url", None) if ctx is not None else None
    if url:
        return str(url)
    try:
        headers = ctx.headers if ctx is not None else {}
        host = headers.get("Host")
        origin = headers.get("Origin")
    except Exception:
        host, origin = None, None
    if origin == "null":
        # sandboxed preview frame: opaque origin, never navigable
        return "null"
    if origin:
        return origin.rstrip("/") + "/"
    if host:
        return f"http://{host}/"
    return DEFAULT_PAGE_URL


def safe_rerun() -> None:
    if hasattr(st, "rerun"): st.rerun()
    elif hasattr(st, "experimental_rerun"): st.experimental_rerun()
    else: st.stop()
