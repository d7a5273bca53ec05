#file: backend/cities.py

from backend.models import City

NORTH_AMERICAN_CITIES = [
    # United States
    City(city="New York", country="United States", lat=40.7128, lng=-74.0060),
    City(city="Los Angeles", country="United States", lat=34.0522, lng=-118.2437),
    City(city="Chicago", country="United States", lat=41.8781, lng=-87.6298),
    City(city="Houston", country="United States", lat=29.7604, lng=-95.3698),
    City(city="Phoenix", country="United States", lat=33.4484, lng=-112.0740),
    City(city="Philadelphia", country="United States", lat=39.9526, lng=-75.1652),
    City(city="San Antonio", country="United States", lat=29.4241, lng=-98.4936),
    City(city="San Diego", country="United States", lat=32.7157, lng=-117.1611),
    City(city="Dallas", country="United States", lat=32.7767, lng=-96.7970),
    City(city="San Jose", country="United States", lat=37.3382, lng=-121.8863),
    City(city="Austin", country="United States", lat=30.2672, lng=-97.7431),
    City(city="Jacksonville", country="United States", lat=30.3322, lng=-81.6557),
    City(city="San Francisco", country="United States", lat=37.7749, lng=-122.4194),
    City(city="Seattle", country="United States", lat=47.6062, lng=-122.3321),
    City(city="Denver", country="United States", lat=39.7392, lng=-104.9903),
    City(city="Miami", country="United States", lat=25.7617, lng=-80.1918),
    City(city="Boston", country="United States", lat=42.3601, lng=-71.0589),
    City(city="Atlanta", country="United States", lat=33.7490, lng=-84.3880),
    City(city="Washington, D.C.", country="United States", lat=38.9072, lng=-77.0369),
    City(city="Las Vegas", country="United States", lat=36.1699, lng=-115.1398),

    # Canada
    City(city="Toronto", country="Canada", lat=43.6532, lng=-79.3832),
    City(city="Montreal", country="Canada", lat=45.5017, lng=-73.5673),
    City(city="Vancouver", country="Canada", lat=49.2827, lng=-123.1207),
    City(city="Calgary", country="Canada", lat=51.0447, lng=-114.0719),
    City(city="Edmonton", country="Canada", lat=53.5461, lng=-113.4938),
    City(city="Ottawa", country="Canada", lat=45.4215, lng=-75.6972),
    City(city="Winnipeg", country="Canada", lat=49.8951, lng=-97.1384),
    City(city="Quebec City", country="Canada", lat=46.8139, lng=-71.2080),
    City(city="Halifax", country="Canada", lat=44.6488, lng=-63.5752),

    # Mexico
    City(city="Mexico City", country="Mexico", lat=19.4326, lng=-99.1332),
    City(city="Guadalajara", country="Mexico", lat=20.6597, lng=-103.3496),
    City(city="Monterrey", country="Mexico", lat=25.6866, lng=-100.3161),
    City(city="Puebla", country="Mexico", lat=19.0414, lng=-98.2063),
    City(city="Tijuana", country="Mexico", lat=32.5149, lng=-117.0382),
    City(city="Mérida", country="Mexico", lat=20.9674, lng=-89.5926),
    City(city="Cancún", country="Mexico", lat=21.1619, lng=-86.8515),

    # Central America
    City(city="Guatemala City", country="Guatemala", lat=14.6349, lng=-90.5069),
    City(city="San Salvador", country="El Salvador", lat=13.6929, lng=-89.2182),
    City(city="Tegucigalpa", country="Honduras", lat=14.0723, lng=-87.1921),
    City(city="Managua", country="Nicaragua", lat=12.1364, lng=-86.2514),
    City(city="San José", country="Costa Rica", lat=9.9281, lng=-84.0907),
    City(city="Panama City", country="Panama", lat=8.9824, lng=-79.5199),

    # Caribbean
    City(city="Havana", country="Cuba", lat=23.1136, lng=-82.3666),
    City(city="Santo Domingo", country="Dominican Republic", lat=18.4861, lng=-69.9312),
    City(city="Port-au-Prince", country="Haiti", lat=18.5944, lng=-72.3074),
    City(city="Kingston", country="Jamaica", lat=17.9712, lng=-76.7936),
    City(city="San Juan", country="Puerto Rico", lat=18.4655, lng=-66.1057),
]
