#file: frontend/ui_elements.py

import streamlit as st
import plotly.express as px
import plotly.graph_objects as go

AQI_BANDS = [(0, 50, "#00E400"), (50, 100, "#FFFF00"), (100, 150, "#FF7E00"), (150, 200, "#FF0000"),
    (200, 300, "#8F3F97"), (300, 500, "#7E0023")]

POLLUTANTS = {"aqi" : "Air Quality Index", "pm25" : "Fine particulate matter (PM2.5)", "no2" : "Nitrogen dioxide (NO₂)",
    "o3" : "Ozone (O₃)", "so2" : "Sulfur dioxide (SO₂)", "co" : "Carbon monoxide (CO)"}


def display_gauge(aqi, level) :
    """Display the current AQI as a gauge coloured by EPA band."""
    fig = go.Figure(go.Indicator(
        mode = "gauge+number",
        value = aqi,
        title = {"text" : level},
        gauge = {
            "axis" : {"range" : [0, 500]},
            "bar" : {"color" : "black"},
            "steps" : [{"range" : [low, high], "color" : color} for low, high, color in AQI_BANDS]
        }
    ))
    fig.update_layout(height = 300, margin = {"r" : 20, "t" : 50, "l" : 20, "b" : 0})
    st.plotly_chart(fig)


def display_map(city_df) :
    """Display a map with cities coloured by AQI."""
    # if there is no column "size" in the DataFrame, add it with a default value of 10
    if "size" not in city_df.columns :
        city_df["size"] = 10

    fig_map = px.scatter_mapbox(
        city_df,
        lat = "lat",
        lon = "lon",
        hover_name = "city",
        hover_data = ["aqi", "category", "trend"],
        color = "aqi",
        color_continuous_scale = [color for _, _, color in AQI_BANDS[:4]],
        size = "size",
        zoom = 2.2,
        height = 500,
        title = "City Air Quality"
    )
    fig_map.update_layout(
        mapbox_style = "open-street-map",
        margin = {
            "r" : 0,
            "t" : 30,
            "l" : 0,
            "b" : 0
        }
    )

    st.plotly_chart(fig_map)


def display_events_map(events_df) :
    """Display natural events on a map."""
    fig_map = px.scatter_mapbox(
        events_df,
        lat = "lat",
        lon = "lon",
        hover_name = "title",
        color = "category",
        zoom = 1.5,
        height = 450,
        title = "Wildfires, dust and volcanic activity"
    )
    fig_map.update_layout(mapbox_style = "open-street-map", margin = {"r" : 0, "t" : 30, "l" : 0, "b" : 0})
    st.plotly_chart(fig_map)


def display_charts(data_frame, title_suffix = "") :
    """Display line charts for the pollutant series."""

    data_frame = data_frame.sort_values(by = "timestamp")

    for pollutant, title in POLLUTANTS.items() :
        if pollutant in data_frame.columns and data_frame[pollutant].notna().any() :
            fig = px.line(
                data_frame,
                x = "timestamp",
                y = pollutant,
                title = f"{title}{title_suffix}",
                labels = {
                    "timestamp" : "Time",
                    pollutant : pollutant.upper()
                }
            )
            st.plotly_chart(fig)


def display_forecast(forecast_df) :
    """Display the forecast with AQI and weather drivers."""
    fig = px.line(forecast_df, x = "hour", y = ["aqi", "pm25", "no2"], markers = True, title = "24-hour forecast",
        labels = {"hour" : "Hour", "value" : "Level", "variable" : "Pollutant"})
    fig.update_layout(legend = dict(orientation = "h", yanchor = "top", y = -0.2, xanchor = "center", x = 0.5))
    st.plotly_chart(fig)
