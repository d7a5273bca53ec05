#file: backend/models.py

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Literal, Optional


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class RegionalBaseline(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: str = Field(..., description="Bucket the coordinate falls into")
    aqi: float = Field(..., ge=0, description="Baseline AQI before time-of-day factors")
    pm25: float = Field(..., ge=0, description="PM2.5 concentration (µg/m³)")
    no2: float = Field(..., ge=0, description="NO2 concentration (ppb)")
    o3: float = Field(..., ge=0, description="O3 concentration (ppb)")
    so2: float = Field(..., ge=0, description="SO2 concentration (ppb)")
    co: float = Field(..., ge=0, description="CO concentration (ppm)")


class PollutantSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="Timestamp in ISO format (UTC)")
    aqi: int = Field(..., ge=0, le=500, description="Air Quality Index")
    pm25: float = Field(..., ge=0, description="PM2.5 concentration (µg/m³)")
    no2: float = Field(..., ge=0, description="NO2 concentration (ppb)")
    o3: float = Field(..., ge=0, description="O3 concentration (ppb)")
    so2: float = Field(..., ge=0, description="SO2 concentration (ppb)")
    co: float = Field(..., ge=0, description="CO concentration (ppm)")
    coordinates: Coordinate


class SelectedLocation(BaseModel):
    city: str
    country: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lng)


class SeriesResponse(BaseModel):
    coordinates: Optional[Coordinate] = None
    source: Literal["simulated"] = "simulated"
    notice: Optional[str] = None
    samples: List[PollutantSample] = Field(default_factory=list)


class VisibilityChange(BaseModel):
    visible: bool


class ForecastPoint(BaseModel):
    hour: str = Field(..., description="Local wall-clock hour, HH:MM")
    timestamp: datetime
    aqi: int = Field(..., ge=0, le=500)
    pm25: float = Field(..., ge=0)
    no2: float = Field(..., ge=0)
    temperature: int
    wind_speed: float = Field(..., ge=0)
    humidity: int


class AqiInfo(BaseModel):
    level: str
    color: str
    risk: str
    description: str


class HealthProfile(BaseModel):
    age: Literal["child", "adult", "elderly"] = "adult"
    conditions: List[str] = Field(default_factory=list)
    sensitivity: Literal["low", "medium", "high"] = "medium"


class HealthRisk(BaseModel):
    title: str
    description: str
    severity: Literal["low", "medium", "high"]


class ActivityRecommendation(BaseModel):
    activity: str
    recommendation: str


class ProtectiveMeasure(BaseModel):
    measure: str
    priority: Literal["low", "medium", "high"]


class HealthInsights(BaseModel):
    aqi: int
    info: AqiInfo
    recommendation: str
    risks: List[HealthRisk]
    activities: List[ActivityRecommendation]
    measures: List[ProtectiveMeasure]
    risk_score: float = Field(..., ge=0, le=100)


class ExposureProfile(BaseModel):
    hours_outdoors: float = Field(4, ge=0, le=24)
    activity_level: Literal["sedentary", "moderate", "vigorous"] = "moderate"
    use_mask: bool = False
    has_air_purifier: bool = False
    commute_type: Literal["none", "walking", "public", "car"] = "car"
    work_environment: Literal["office", "outdoor", "industrial", "remote"] = "office"
    health_conditions: List[str] = Field(default_factory=list)


class CostBreakdown(BaseModel):
    healthcare: int
    productivity: int
    medication: int
    equipment: int
    total: int


class ExposureRisk(BaseModel):
    aqi: int
    risk_score: float = Field(..., ge=0, le=100)
    costs: CostBreakdown


class PollutantLevel(BaseModel):
    id: str
    name: str
    formula: str
    unit: str
    current_level: float
    who_guideline: float
    epa_guideline: float
    risk_level: Literal["low", "moderate", "high", "very-high"]
    trend: Literal["up", "down", "stable"]
    who_compliant: bool
    epa_compliant: bool


class City(BaseModel):
    city: str
    country: str
    lat: float
    lng: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lng)


class CityRanking(BaseModel):
    rank: int
    city: str
    country: str
    aqi: int
    pm25: float
    no2: float
    o3: float
    so2: Optional[float] = None
    co: Optional[float] = None
    trend: Literal["improving", "deteriorating", "stable"]
    category: Literal["best", "good", "moderate", "poor", "worst"]
    last_update: datetime
    coordinates: Coordinate


class EonetCategoryRef(BaseModel):
    id: int
    title: str = ""


class EonetSource(BaseModel):
    id: str
    url: str = ""


class EonetGeometry(BaseModel):
    date: datetime
    type: str = "Point"
    coordinates: Any = None


class EonetEvent(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    link: str = ""
    categories: List[EonetCategoryRef] = Field(default_factory=list)
    sources: List[EonetSource] = Field(default_factory=list)
    geometries: List[EonetGeometry] = Field(default_factory=list)


class EonetEventsPayload(BaseModel):
    events: List[EonetEvent] = Field(default_factory=list)


class EventsResponse(BaseModel):
    notice: Optional[str] = None
    events: List[EonetEvent] = Field(default_factory=list)


class OpenAQMeasurement(BaseModel):
    parameter: str
    value: float
    unit: str = ""
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True)


class OpenAQLocation(BaseModel):
    location: str = ""
    city: Optional[str] = None
    country: Optional[str] = None
    measurements: List[OpenAQMeasurement] = Field(default_factory=list)


class OpenAQPayload(BaseModel):
    results: List[OpenAQLocation] = Field(default_factory=list)


class AirQualityLatest(BaseModel):
    source: Literal["openaq", "simulated"]
    notice: Optional[str] = None
    measurements: List[OpenAQMeasurement] = Field(default_factory=list)
    sample: Optional[PollutantSample] = None
