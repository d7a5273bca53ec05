#file: frontend/app.py

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import asyncio
import pandas as pd
import streamlit as st

st.set_page_config(page_title="Air Quality Dashboard", page_icon="🌍", layout="wide")
pd.options.display.float_format = "{:.2f}".format

from frontend.location_api import fetch_cities, fetch_selected_location, save_selected_location
from frontend.data_fetch import (fetch_events, fetch_exposure_risk, fetch_forecast, fetch_health_insights,
    fetch_historical, fetch_pollutants, fetch_rankings, fetch_series, refresh_series)
from frontend.utils import events_to_frame, get_city_names_and_dict, rankings_to_frame, selected_label, series_to_frame
from frontend.ui_elements import display_charts, display_events_map, display_forecast, display_gauge, display_map

# Streamlit UI
st.title("Air Quality Dashboard")

cities = fetch_cities()
if not cities :
    st.error("Backend unavailable, please start the FastAPI service.")
    st.stop()

city_names, city_dict = get_city_names_and_dict(cities)
selected_location = fetch_selected_location()
default_label = selected_label(selected_location, city_names)

col1, col2 = st.columns([3, 1])
with col1:
    selected_city = st.selectbox("Select a city", city_names, index = city_names.index(default_label))
with col2:
    if st.button("Refresh data") :
        asyncio.run(refresh_series())

# Persist a changed selection; the backend moves its series to the new city
if selected_city != default_label or selected_location is None :
    save_selected_location(city_dict[selected_city])

series = asyncio.run(fetch_series())
if not series or not series.get("samples") :
    st.warning("No data.")
    st.stop()

if series.get("notice") :
    st.info(f"{series['notice']}: values are simulated from a regional model.")

df = series_to_frame(series["samples"])
latest = df.iloc[-1]
insights_tab, trends_tab, health_tab, rankings_tab, events_tab = st.tabs(
    ["Current", "Trends", "Health", "Rankings", "Natural events"])

with insights_tab:
    insights = asyncio.run(fetch_health_insights())
    col1, col2 = st.columns([1, 2])
    with col1:
        display_gauge(int(latest["aqi"]), insights["info"]["level"] if insights else "AQI")
    with col2:
        if insights :
            st.subheader(insights["info"]["description"])
            st.write(insights["recommendation"])
        st.metric("PM2.5 (µg/m³)", f"{latest['pm25']:.1f}")
        st.metric("NO₂ (ppb)", f"{latest['no2']:.1f}")
    forecast = asyncio.run(fetch_forecast())
    if forecast :
        display_forecast(pd.DataFrame(forecast))

with trends_tab:
    display_charts(df, " - last 72 hours")

    col1, col2 = st.columns(2)
    with col1:
        time_range = st.selectbox("History", ["24h", "3m", "6m", "1y"])
    with col2:
        location_type = st.selectbox("Location profile", ["urban", "suburban", "rural"])
    historical_df = series_to_frame(asyncio.run(fetch_historical(time_range, location_type)))
    if not historical_df.empty :
        st.line_chart(historical_df.set_index("timestamp")[["aqi"]])

with health_tab:
    pollutants = asyncio.run(fetch_pollutants())
    if pollutants :
        st.dataframe(pd.DataFrame(pollutants)[["formula", "current_level", "unit", "who_guideline", "epa_guideline",
            "risk_level", "trend"]])

    col1, col2, col3 = st.columns(3)
    with col1:
        age = st.selectbox("Age group", ["adult", "child", "elderly"])
    with col2:
        conditions = st.multiselect("Health conditions", ["respiratory", "heart", "pregnant"])
    with col3:
        sensitivity = st.selectbox("Sensitivity", ["medium", "low", "high"])
    profile_insights = asyncio.run(fetch_health_insights(age, conditions, sensitivity))
    if profile_insights :
        st.metric("Health risk score", f"{profile_insights['risk_score']:.0f}/100")
        for risk in profile_insights["risks"] :
            st.write(f"**{risk['title']}** ({risk['severity']}): {risk['description']}")
        for measure in profile_insights["measures"] :
            st.write(f"- {measure['measure']}")

    st.subheader("Personal exposure")
    col1, col2, col3 = st.columns(3)
    with col1:
        hours_outdoors = st.slider("Hours outdoors", 0, 24, 4)
        activity_level = st.selectbox("Activity level", ["moderate", "sedentary", "vigorous"])
    with col2:
        commute_type = st.selectbox("Commute", ["car", "none", "walking", "public"])
        work_environment = st.selectbox("Work environment", ["office", "outdoor", "industrial", "remote"])
    with col3:
        use_mask = st.checkbox("Wear a mask")
        has_air_purifier = st.checkbox("Air purifier at home")
    exposure = asyncio.run(fetch_exposure_risk({"hours_outdoors" : hours_outdoors, "activity_level" : activity_level,
        "commute_type" : commute_type, "work_environment" : work_environment, "use_mask" : use_mask,
        "has_air_purifier" : has_air_purifier, "health_conditions" : conditions}))
    if exposure :
        st.metric("Exposure risk", f"{exposure['risk_score']:.0f}/100")
        st.write(f"Estimated monthly cost: ${exposure['costs']['total']}")

with rankings_tab:
    rankings_df = rankings_to_frame(asyncio.run(fetch_rankings()))
    if not rankings_df.empty :
        display_map(rankings_df)
        st.dataframe(rankings_df[["rank", "city", "country", "aqi", "category", "trend"]])

with events_tab:
    events = asyncio.run(fetch_events())
    if events.get("notice") :
        st.warning(events["notice"])
    events_df = events_to_frame(events["events"])
    if events_df.empty :
        st.info("No open natural events.")
    else :
        display_events_map(events_df)
        st.dataframe(events_df.sort_values(by = "date", ascending = False))
