#file: frontend/location_api.py

import logging
import requests

from frontend.data_fetch import FASTAPI_URL


def fetch_cities() :
    """Fetch the selectable city list from FastAPI."""
    try:
        response = requests.get(f"{FASTAPI_URL}/cities", timeout=10)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logging.error(f"Error fetching cities: {e}")
        return []


def fetch_selected_location() :
    """Fetch the persisted city selection, None when nothing was selected yet."""
    try:
        response = requests.get(f"{FASTAPI_URL}/location", timeout=10)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logging.error(f"Error fetching selected location: {e}")
        return None


def save_selected_location(city) -> bool :
    """Persist the selection; the backend moves its series to the new city."""
    payload = {key: city[key] for key in ("city", "country", "lat", "lng")}
    try:
        response = requests.put(f"{FASTAPI_URL}/location", json=payload, timeout=10)
        response.raise_for_status()
        return True
    except requests.RequestException as e:
        logging.error(f"Error saving selected location: {e}")
        return False
