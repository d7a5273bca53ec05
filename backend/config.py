# file: backend/config.py

import os
from dotenv import load_dotenv

load_dotenv()

NASA_API_KEY = os.getenv("NASA_API_KEY", "DEMO_KEY")
NASA_BASE_URL = os.getenv("NASA_BASE_URL", "https://api.nasa.gov")
EONET_BASE_URL = os.getenv("EONET_BASE_URL", "https://eonet.gsfc.nasa.gov/api/v2.1")
OPENAQ_BASE_URL = os.getenv("OPENAQ_BASE_URL", "https://api.openaq.org/v2")
N8N_WEBHOOK_URL = os.getenv("N8N_WEBHOOK_URL")

SERIES_TIMEZONE = os.getenv("SERIES_TIMEZONE", "UTC")
SELECTED_LOCATION_FILE = os.getenv("SELECTED_LOCATION_FILE", ".selected_location.json")

try :
    SERIES_REFRESH_SECONDS = int(os.getenv("SERIES_REFRESH_SECONDS", "30"))
    EVENTS_POLL_SECONDS = int(os.getenv("EVENTS_POLL_SECONDS", "120"))
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
except ValueError as e :
    raise ValueError(f"Invalid numeric configuration value: {e}")

# Validate environment variables
if SERIES_REFRESH_SECONDS <= 0 or EVENTS_POLL_SECONDS <= 0 :
    raise ValueError("Refresh intervals must be positive")

DEMO_NOTICE = "Using demonstration data"
