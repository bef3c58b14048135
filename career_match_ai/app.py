"""
Career Match AI – Streamlit frontend.
No business logic in layout; every request goes through the Dispatcher.
"""

import asyncio
from typing import Any, Dict, List, Tuple

import streamlit as st

from career_match_ai.config import Settings
from career_match_ai.dispatcher import Dispatcher
from career_match_ai.errors import ConfigurationError
from career_match_ai.schemas.worker_request import REQUIRED_SELECTED_POINTS
from career_match_ai.utils.helpers import is_linkedin_url

POINT_TYPE_LABELS = {
    "education": "🎓 Education",
    "experience": "💼 Experience",
    "skill": "🛠 Skill",
    "achievement": "🏆 Achievement",
    "background": "🌍 Background",
}


def _run_request(payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    """Run one Dispatcher request on a fresh event loop (Streamlit scripts are sync)."""
    dispatcher = Dispatcher(Settings.from_env())
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(dispatcher.dispatch(payload))
    finally:
        loop.close()


def _type_label(kind: str) -> str:
    return POINT_TYPE_LABELS.get((kind or "").lower(), kind or "Other")


def _selected_points(points: List[Dict[str, str]]) -> List[Dict[str, str]]:
    return [p for i, p in enumerate(points) if st.session_state.get(f"poi_{i}")]


def _init_state() -> None:
    for key, default in (("points", []), ("profiles", []), ("error", None)):
        if key not in st.session_state:
            st.session_state[key] = default


def render_layout() -> None:
    """Streamlit page layout: analyze a profile, choose three points, find matches."""
    st.set_page_config(page_title="Career Match AI", layout="centered")
    st.title("Career Match AI")
    st.markdown("*Find professionals who started where you are and got where you want to be.*")
    st.divider()
    _init_state()

    # ----- Step 1: profile -----
    linkedin_url = st.text_input(
        "LinkedIn profile URL",
        placeholder="https://www.linkedin.com/in/your-name",
        key="linkedin_url",
    )
    analyze_clicked = st.button("Analyze profile", type="primary", key="analyze_btn")
    if analyze_clicked:
        if not linkedin_url.strip():
            st.session_state["error"] = "LinkedIn URL is required"
        elif not is_linkedin_url(linkedin_url):
            st.session_state["error"] = "Please enter a valid LinkedIn URL"
        else:
            st.session_state["error"] = None
            st.session_state["profiles"] = []
            with st.spinner("Reading profile and extracting points of interest…"):
                try:
                    status, data = _run_request({"mode": "analyze", "linkedinUrl": linkedin_url.strip()})
                except ConfigurationError as e:
                    status, data = e.status_code, {"error": e.message}
            if status == 200:
                st.session_state["points"] = data["criteria"]["pointsOfInterest"]
            else:
                st.session_state["points"] = []
                st.session_state["error"] = data.get("error") or "Failed to analyze profile"

    if st.session_state.get("error"):
        st.error(st.session_state["error"])

    points: List[Dict[str, str]] = st.session_state.get("points") or []
    if not points:
        st.info("Paste a LinkedIn profile URL and click **Analyze profile** to get started.")
        return

    # ----- Step 2: choose points -----
    st.subheader(f"Choose exactly {REQUIRED_SELECTED_POINTS} points of interest")
    for i, point in enumerate(points):
        st.checkbox(f"{_type_label(point['type'])} · {point['description']}", key=f"poi_{i}")
    selected = _selected_points(points)
    st.caption(f"{len(selected)} of {REQUIRED_SELECTED_POINTS} selected")

    career_goal = st.text_input(
        "Career goal",
        placeholder="e.g. CEO at a tech company",
        key="career_goal",
    )
    ready = len(selected) == REQUIRED_SELECTED_POINTS and bool(career_goal.strip())
    if st.button("Find matches", type="primary", disabled=not ready, key="match_btn"):
        with st.spinner("Searching for comparable professionals (this can take a minute)…"):
            try:
                status, data = _run_request(
                    {"mode": "match", "careerGoal": career_goal.strip(), "selectedPoints": selected}
                )
            except ConfigurationError as e:
                status, data = e.status_code, {"error": e.message}
        if status == 200:
            st.session_state["profiles"] = data["matchedProfiles"]
            st.session_state["error"] = None
        else:
            st.session_state["profiles"] = []
            st.error(data.get("error") or "Failed to find matches")

    # ----- Step 3: results -----
    profiles: List[Dict[str, str]] = st.session_state.get("profiles") or []
    if profiles:
        st.divider()
        st.subheader("Matched profiles")
        for profile in profiles:
            with st.container():
                col_a, col_b = st.columns([3, 1])
                with col_a:
                    st.markdown(f"### {profile['title']}")
                    st.caption(profile["snippet"])
                with col_b:
                    st.link_button("Open profile", url=profile["url"], type="secondary")


if __name__ == "__main__":
    render_layout()
