# src/generator/catalog.py
# Fixed distribution tables that shape the synthetic traffic.


###### EVENT TYPES ######
PAGE_VIEW = "page_view"
CLICK = "click"
FORM_SUBMIT = "form_submit"
VIDEO_PLAY = "video_play"
DOWNLOAD = "download"

EVENT_TYPES = [
    (PAGE_VIEW, 0.60),
    (CLICK, 0.25),
    (FORM_SUBMIT, 0.10),
    (VIDEO_PLAY, 0.03),
    (DOWNLOAD, 0.02),
]


###### GEOGRAPHY ######
# country code -> (cities, weight)
LOCATIONS = {
    "US": (("New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia",
            "San Antonio", "San Diego", "Dallas", "San Jose"), 0.45),
    "GB": (("London", "Manchester", "Birmingham", "Leeds", "Glasgow", "Liverpool",
            "Newcastle", "Sheffield"), 0.12),
    "CA": (("Toronto", "Montreal", "Vancouver", "Calgary", "Ottawa", "Edmonton"), 0.10),
    "DE": (("Berlin", "Munich", "Hamburg", "Frankfurt", "Cologne", "Stuttgart"), 0.08),
    "FR": (("Paris", "Lyon", "Marseille", "Toulouse", "Nice", "Nantes"), 0.07),
    "AU": (("Sydney", "Melbourne", "Brisbane", "Perth", "Adelaide"), 0.06),
    "IN": (("Mumbai", "Delhi", "Bangalore", "Hyderabad", "Chennai", "Kolkata"), 0.05),
    "BR": (("São Paulo", "Rio de Janeiro", "Brasília", "Salvador", "Fortaleza"), 0.04),
    "JP": (("Tokyo", "Osaka", "Kyoto", "Yokohama", "Nagoya"), 0.03),
}

COUNTRIES = [(code, weight) for code, (_, weight) in LOCATIONS.items()]


###### DEVICES & BROWSERS ######
DEVICES = [
    ("desktop", 0.55),
    ("mobile", 0.40),
    ("tablet", 0.05),
]

BROWSERS = [
    ("Chrome", 0.65),
    ("Safari", 0.20),
    ("Firefox", 0.08),
    ("Edge", 0.05),
    ("Other", 0.02),
]

# device class -> operating system weights
OPERATING_SYSTEMS = {
    "desktop": [("Windows", 0.70), ("macOS", 0.22), ("Linux", 0.08)],
    "mobile": [("Android", 0.55), ("iOS", 0.45)],
    "tablet": [("iOS", 0.60), ("Android", 0.40)],
}
UNKNOWN_OS = "Unknown"


###### EVENTS IN SESSION HINT ######
SESSION_EVENTS_MIN = 1
SESSION_EVENTS_MAX = 50


###### FAKER POOLS ######
PAGE_URL_POOL_SIZE = 500
REFERRER_POOL_SIZE = 12
WORD_POOL_SIZE = 200
FILE_NAME_POOL_SIZE = 200
