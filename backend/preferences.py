#file: backend/preferences.py

import json
import logging
import os
from pydantic import ValidationError

from backend.models import SelectedLocation


class LocationStore :
    """The user's last selected city, kept as JSON text in a single file."""

    def __init__(self, path: str) :
        self.path = path

    def load(self) -> SelectedLocation | None :
        if not os.path.exists(self.path) :
            return None
        try :
            with open(self.path, "r", encoding = "utf-8") as f :
                return SelectedLocation.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e :
            logging.error(f"Error parsing selected location from {self.path}: {e}")
            return None

    def save(self, location: SelectedLocation) -> None :
        with open(self.path, "w", encoding = "utf-8") as f :
            json.dump(location.model_dump(), f)
        logging.info(f"Saved selected location {location.city}, {location.country}")

    def clear(self) -> None :
        if os.path.exists(self.path) :
            os.remove(self.path)
