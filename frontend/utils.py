#file: frontend/utils.py

import pandas as pd


def get_city_names_and_dict(cities) :
    """Generate "City, Country" labels and a label -> city mapping."""
    city_dict = {f"{city['city']}, {city['country']}" : city for city in cities}
    return list(city_dict.keys()), city_dict


def selected_label(selected_location, city_names) :
    """Label of the persisted selection, or the first city when it is unknown."""
    if selected_location :
        label = f"{selected_location['city']}, {selected_location['country']}"
        if label in city_names :
            return label
    return city_names[0] if city_names else None


def series_to_frame(samples) :
    """Convert series samples into a chronologically sorted DataFrame."""
    if not samples :
        return pd.DataFrame()

    df = pd.DataFrame(samples).drop(columns = ["coordinates"], errors = "ignore")
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc = True)
    return df.sort_values(by = "timestamp").reset_index(drop = True)


def rankings_to_frame(rankings) :
    """Flatten city rankings for tables and the map."""
    if not rankings :
        return pd.DataFrame()

    df = pd.DataFrame(rankings)
    df["lat"] = df["coordinates"].map(lambda c : c["lat"])
    df["lon"] = df["coordinates"].map(lambda c : c["lon"])
    df["size"] = 10
    return df.drop(columns = ["coordinates"]).sort_values(by = "rank").reset_index(drop = True)


def events_to_frame(events) :
    """One row per event located at its first point geometry; events without a point are dropped."""
    rows = []
    for event in events :
        geometry = next((g for g in event.get("geometries", []) if g.get("type") == "Point"), None)
        if geometry is None or not isinstance(geometry.get("coordinates"), list) :
            continue
        lon, lat = geometry["coordinates"][:2]
        category = event["categories"][0]["title"] if event.get("categories") else "Unknown"
        rows.append({"title" : event["title"], "category" : category, "date" : geometry["date"],
            "lat" : lat, "lon" : lon})

    df = pd.DataFrame(rows, columns = ["title", "category", "date", "lat", "lon"])
    df["date"] = pd.to_datetime(df["date"], utc = True)
    return df
