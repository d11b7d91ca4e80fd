"""Settings shared by every environment; values come from the process environment."""

import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Office geofence
OFFICE_LATITUDE = float(os.getenv("OFFICE_LATITUDE", "22.298873262930066"))
OFFICE_LONGITUDE = float(os.getenv("OFFICE_LONGITUDE", "73.13129619568713"))
OFFICE_RADIUS_METERS = float(os.getenv("OFFICE_RADIUS_METERS", "100"))

# Face matching
FACE_SIMILARITY_THRESHOLD = float(os.getenv("FACE_SIMILARITY_THRESHOLD", "0.6"))

# Working-day rules, evaluated in the office's fixed UTC offset (IST = +330)
UTC_OFFSET_MINUTES = int(os.getenv("UTC_OFFSET_MINUTES", "330"))
LATE_CUTOFF = os.getenv("LATE_CUTOFF", "10:00")
HALF_DAY_LATE_MINUTES = int(os.getenv("HALF_DAY_LATE_MINUTES", "240"))
EARLY_DEPARTURE_CUTOFF = os.getenv("EARLY_DEPARTURE_CUTOFF", "19:00")
OPEN_RECORD_WINDOW_HOURS = int(os.getenv("OPEN_RECORD_WINDOW_HOURS", "24"))

NOTIFICATION_WORKERS = int(os.getenv("NOTIFICATION_WORKERS", "2"))
