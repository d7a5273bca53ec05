#file: backend/health.py

from typing import List, Sequence

from backend.models import (ActivityRecommendation, AqiInfo, CostBreakdown, ExposureProfile, ExposureRisk,
                            HealthInsights, HealthProfile, HealthRisk, PollutantLevel, PollutantSample,
                            ProtectiveMeasure)
from backend.utils import clamp, round_half_up

# upper AQI bound -> category
AQI_CATEGORIES = [
    (50, AqiInfo(level="Good", color="#00E400", risk="Low", description="Air quality is satisfactory")),
    (100, AqiInfo(level="Moderate", color="#FFFF00", risk="Moderate", description="Air quality is acceptable")),
    (150, AqiInfo(level="Unhealthy for Sensitive Groups", color="#FF7E00", risk="High for Sensitive Groups",
                  description="Members of sensitive groups may be affected")),
    (200, AqiInfo(level="Unhealthy", color="#FF0000", risk="High", description="Everyone may be affected")),
    (300, AqiInfo(level="Very Unhealthy", color="#8F3F97", risk="Very High",
                  description="Health alert: everyone may experience more serious health effects")),
]
HAZARDOUS = AqiInfo(level="Hazardous", color="#7E0023", risk="Hazardous",
                    description="Health warning of emergency conditions")

RECOMMENDATIONS = [
    (50, "Air quality is satisfactory. Enjoy your usual outdoor activities."),
    (100, "Air quality is acceptable. Consider reducing intense outdoor activities if you are unusually sensitive."),
    (150, "Members of sensitive groups may experience health effects. The general public is less likely to be affected."),
    (200, "Everyone may begin to experience health effects. Members of sensitive groups may experience more serious health effects."),
    (300, "Health alert: everyone may experience more serious health effects."),
]

ACTIVITY_MULTIPLIERS = {"sedentary": 1.0, "moderate": 1.5, "vigorous": 2.2}
COMMUTE_MULTIPLIERS = {"none": 1.0, "walking": 1.8, "public": 1.4, "car": 1.2}
WORK_MULTIPLIERS = {"office": 1.0, "outdoor": 2.5, "industrial": 3.0, "remote": 0.8}

POLLUTANTS = {
    "pm25": {"name": "Fine Particulate Matter", "formula": "PM2.5", "unit": "μg/m³", "who": 5, "epa": 12},
    "pm10": {"name": "Coarse Particulate Matter", "formula": "PM10", "unit": "μg/m³", "who": 15, "epa": 35},
    "no2": {"name": "Nitrogen Dioxide", "formula": "NO₂", "unit": "ppb", "who": 10, "epa": 53},
    "o3": {"name": "Ozone", "formula": "O₃", "unit": "ppb", "who": 50, "epa": 70},
    "so2": {"name": "Sulfur Dioxide", "formula": "SO₂", "unit": "ppb", "who": 7, "epa": 75},
    "co": {"name": "Carbon Monoxide", "formula": "CO", "unit": "ppm", "who": 4, "epa": 9},
}


def aqi_info(aqi: float) -> AqiInfo:
    for upper, info in AQI_CATEGORIES:
        if aqi <= upper:
            return info
    return HAZARDOUS


def health_recommendation(aqi: float) -> str:
    for upper, text in RECOMMENDATIONS:
        if aqi <= upper:
            return text
    return "Health warning of emergency conditions. The entire population is more likely to be affected."


def health_risks(aqi: float, profile: HealthProfile) -> List[HealthRisk]:
    risks = []
    if aqi > 50:
        risks.append(HealthRisk(title="Respiratory System",
                                description="Irritation of airways, coughing, difficulty breathing",
                                severity="high" if aqi > 100 else "medium"))
    if aqi > 100:
        risks.append(HealthRisk(title="Cardiovascular System",
                                description="Increased risk of heart attacks and strokes",
                                severity="high" if aqi > 150 else "medium"))
        risks.append(HealthRisk(title="Eyes & Skin", description="Irritation, redness, and discomfort",
                                severity="low"))
    if aqi > 150:
        risks.append(HealthRisk(title="Cognitive Function",
                                description="Reduced cognitive performance and increased fatigue",
                                severity="medium"))

    if "respiratory" in profile.conditions and aqi > 50:
        risks.append(HealthRisk(title="Asthma/COPD Risk",
                                description="High risk of exacerbation - use inhaler as directed", severity="high"))
    if "heart" in profile.conditions and aqi > 100:
        risks.append(HealthRisk(title="Cardiac Risk", description="Increased strain on cardiovascular system",
                                severity="high"))
    if "pregnant" in profile.conditions and aqi > 100:
        risks.append(HealthRisk(title="Pregnancy Risk", description="Potential impact on fetal development",
                                severity="medium"))
    if profile.age == "elderly" and aqi > 100:
        risks.append(HealthRisk(title="Elderly Risk",
                                description="Increased vulnerability to respiratory and cardiac issues",
                                severity="high"))
    if profile.age == "child" and aqi > 50:
        risks.append(HealthRisk(title="Children's Risk", description="Developing lungs more susceptible to damage",
                                severity="medium"))
    return risks


def activity_recommendations(aqi: float, profile: HealthProfile) -> List[ActivityRecommendation]:
    if aqi <= 50:
        return [ActivityRecommendation(activity="All outdoor activities", recommendation="Safe for everyone")]
    if aqi <= 100:
        advice = "Consider reducing intensity" if profile.sensitivity == "high" else "Generally safe"
        return [ActivityRecommendation(activity="Intense outdoor exercise", recommendation=advice)]
    if aqi <= 150:
        recommendations = [ActivityRecommendation(activity="Outdoor exercise",
                                                  recommendation="Sensitive groups should reduce prolonged exertion")]
        if "respiratory" in profile.conditions or "heart" in profile.conditions:
            recommendations.append(ActivityRecommendation(activity="Outdoor activities",
                                                          recommendation="Limit time outdoors and avoid exertion"))
        return recommendations
    if aqi <= 200:
        return [ActivityRecommendation(activity="All outdoor activities",
                                       recommendation="Everyone should reduce prolonged exertion")]
    return [ActivityRecommendation(activity="Any outdoor activities",
                                   recommendation="Avoid all outdoor physical activities")]


def protective_measures(aqi: float, profile: HealthProfile) -> List[ProtectiveMeasure]:
    measures = []
    if aqi > 100:
        priority = "high" if aqi > 150 else "medium"
        measures.append(ProtectiveMeasure(measure="Wear N95 mask outdoors", priority=priority))
        measures.append(ProtectiveMeasure(measure="Use air purifiers indoors", priority=priority))
    if aqi > 150:
        measures.append(ProtectiveMeasure(measure="Keep windows closed", priority="high"))
        if "respiratory" in profile.conditions:
            measures.append(ProtectiveMeasure(measure="Carry rescue inhaler at all times", priority="high"))
    if aqi > 200:
        measures.append(ProtectiveMeasure(measure="Consider relocating if possible", priority="high"))
    measures.append(ProtectiveMeasure(measure="Stay hydrated", priority="low"))
    return measures


def risk_score(aqi: float, profile: HealthProfile) -> float:
    score = aqi / 5
    if "respiratory" in profile.conditions:
        score += 20
    if "heart" in profile.conditions:
        score += 25
    if "pregnant" in profile.conditions:
        score += 15
    if profile.age == "elderly":
        score += 20
    if profile.age == "child":
        score += 15
    if profile.sensitivity == "high":
        score += 10
    return clamp(score, 0, 100)


def health_insights(aqi: int, profile: HealthProfile) -> HealthInsights:
    return HealthInsights(
        aqi=aqi,
        info=aqi_info(aqi),
        recommendation=health_recommendation(aqi),
        risks=health_risks(aqi, profile),
        activities=activity_recommendations(aqi, profile),
        measures=protective_measures(aqi, profile),
        risk_score=risk_score(aqi, profile)
    )


def exposure_score(aqi: float, profile: ExposureProfile) -> float:
    """Personal exposure on a 0-100 scale; AQI 50 for 8 sedentary office hours is the reference."""
    factor = aqi / 50
    factor *= profile.hours_outdoors / 8
    factor *= ACTIVITY_MULTIPLIERS[profile.activity_level]
    factor *= COMMUTE_MULTIPLIERS[profile.commute_type]
    factor *= WORK_MULTIPLIERS[profile.work_environment]
    if profile.use_mask:
        factor *= 0.6
    if profile.has_air_purifier:
        factor *= 0.7
    return clamp(factor * 20, 0, 100)


def cost_breakdown(score: float, profile: ExposureProfile) -> CostBreakdown:
    base = score * 2
    costs = {
        "healthcare": base * 0.4,
        "productivity": base * 0.3,
        "medication": base * 0.2,
        "equipment": base * 0.1
    }
    if "asthma" in profile.health_conditions:
        costs["medication"] += 15
    if "heart" in profile.health_conditions:
        costs["healthcare"] += 20
    if "respiratory" in profile.health_conditions:
        costs["healthcare"] += 25
    if not profile.has_air_purifier:
        costs["equipment"] += 50
    if not profile.use_mask:
        costs["equipment"] += 5

    total = sum(costs.values())
    return CostBreakdown(total=round_half_up(total), **{key: round_half_up(value) for key, value in costs.items()})


def exposure_risk(aqi: int, profile: ExposureProfile) -> ExposureRisk:
    score = exposure_score(aqi, profile)
    return ExposureRisk(aqi=aqi, risk_score=score, costs=cost_breakdown(score, profile))


def pollutant_risk_level(level: float, guideline: float) -> str:
    ratio = level / guideline
    if ratio <= 0.5:
        return "low"
    if ratio <= 1:
        return "moderate"
    if ratio <= 2:
        return "high"
    return "very-high"


def pollutant_trend(current: float | None, previous: float | None) -> str:
    """Up or down when the value moved by more than 5%."""
    if not current or not previous:
        return "stable"
    change = (current - previous) / previous * 100
    if change > 5:
        return "up"
    if change < -5:
        return "down"
    return "stable"


def pollutant_levels(series: Sequence[PollutantSample]) -> List[PollutantLevel]:
    """Guideline comparison for each pollutant of the latest sample."""
    if not series:
        return []
    latest = series[-1]
    previous = series[-2] if len(series) > 1 else None

    levels = []
    for pollutant_id, meta in POLLUTANTS.items():
        current = getattr(latest, pollutant_id, None)
        if current is None:
            continue
        levels.append(PollutantLevel(
            id=pollutant_id,
            name=meta["name"],
            formula=meta["formula"],
            unit=meta["unit"],
            current_level=round(current, 2),
            who_guideline=meta["who"],
            epa_guideline=meta["epa"],
            risk_level=pollutant_risk_level(current, meta["who"]),
            trend=pollutant_trend(current, getattr(previous, pollutant_id, None)),
            who_compliant=current <= meta["who"],
            epa_compliant=current <= meta["epa"]
        ))
    return levels
