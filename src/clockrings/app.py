"""Streamlit city picker for the two label rings."""

import datetime
import logging
import math

import streamlit as st
from dotenv import load_dotenv
from pytz import utc
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from clockrings.constants import LabelMetrics, log_level  # noqa: E402
from clockrings.distribution import (  # noqa: E402
    CitySelectionError,
    add_city,
    distribute_cities,
)
from clockrings.geometry import arc_length  # noqa: E402
from clockrings.i18n import t  # noqa: E402
from clockrings.models import WorldCity  # noqa: E402
from clockrings.timezones import all_entries, recommended_identifiers  # noqa: E402

logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")

# --- Language detection (browser-first via streamlit-js-eval) ---
# First run returns None; the rerun triggered by streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ru" if _browser_lang.lower().startswith("ru") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(page_title=t("page_title", _lang), page_icon="◷", layout="centered")

# --- Session state initialization ---
if "zones" not in st.session_state:
    st.session_state.zones = tuple(recommended_identifiers())
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None

st.title(t("page_title", _lang))

try:
    _metrics = LabelMetrics.from_env()
except ValueError as e:
    st.error(t("error_config", _lang, error=e))
    st.stop()

# --- Instant ---
_now = datetime.datetime.now(utc)
col_date, col_time = st.columns(2)
with col_date:
    date_val = st.date_input(t("label_time", _lang), value=_now.date())
with col_time:
    time_val = st.time_input(" ", value=_now.time().replace(second=0, microsecond=0))
at = utc.localize(datetime.datetime.combine(date_val, time_val))

cities = WorldCity.from_identifiers(list(st.session_state.zones))

# --- Add form ---
_entries = all_entries(at)
col_pick, col_add = st.columns([4, 1])
with col_pick:
    picked = st.selectbox(
        t("label_city", _lang),
        options=_entries,
        format_func=lambda e: e.display_name,
        index=None,
    )
with col_add:
    st.markdown("<div style='height:1.9rem'></div>", unsafe_allow_html=True)
    submitted = st.button(t("btn_add", _lang), use_container_width=True)

if submitted and picked is not None:
    st.session_state.error_msg = None
    try:
        cities = add_city(cities, WorldCity.make(picked.id), at, _metrics, _lang)
        st.session_state.zones = tuple(c.time_zone_identifier for c in cities)
    except CitySelectionError as e:
        st.session_state.error_msg = str(e)
    st.rerun()

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

# --- Assignment table ---
result = distribute_cities(cities, at, _metrics, lang=_lang)

_COLUMN_WIDTHS = [1, 3, 2, 2, 1]

if not cities:
    st.info(t("empty_selection", _lang))
else:
    for col, key in zip(
        st.columns(_COLUMN_WIDTHS),
        ("col_code", "col_city", "col_local_time", "col_orbit"),
    ):
        col.caption(t(key, _lang))

for city in cities:
    orbit = result.assignment.get(city.id)
    tz = city.time_zone
    if orbit is None or tz is None:
        continue
    col_code, col_city, col_local, col_orbit, col_remove = st.columns(_COLUMN_WIDTHS)
    col_code.markdown(f"**{city.iata_code}**")
    col_city.write(city.name)
    col_local.write(at.astimezone(tz).strftime("%H:%M"))
    col_orbit.write(t(f"orbit_{orbit}", _lang))
    if col_remove.button("✕", key=f"remove_{city.id}", help=t("btn_remove", _lang)):
        st.session_state.zones = tuple(
            z for z in st.session_state.zones if z != city.time_zone_identifier
        )
        st.session_state.error_msg = None
        st.rerun()

for line in result.conflicts:
    st.warning(line)

# --- Free space per ring ---
for orbit in (1, 2):
    free = sum(arc_length(start, end) for start, end in result.free_arcs(orbit))
    st.caption(
        t(
            "free_arc_summary",
            _lang,
            ring=t(f"orbit_{orbit}", _lang),
            degrees=math.degrees(free),
        )
    )

if st.button(t("btn_reset", _lang)):
    st.session_state.zones = tuple(recommended_identifiers())
    st.session_state.error_msg = None
    st.rerun()
