"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_OFFICE_LATITUDE = 22.298873262930066
DEFAULT_OFFICE_LONGITUDE = 73.13129619568713
DEFAULT_OFFICE_RADIUS_METERS = 100.0

DEFAULT_FACE_SIMILARITY_THRESHOLD = 0.6
CHECKIN_DESCRIPTOR_LENGTH = 512
VERIFY_DESCRIPTOR_LENGTH = 128

# IST
DEFAULT_UTC_OFFSET_MINUTES = 330
DEFAULT_LATE_CUTOFF = "10:00"
DEFAULT_EARLY_DEPARTURE_CUTOFF = "19:00"
DEFAULT_HALF_DAY_LATE_MINUTES = 240
DEFAULT_OPEN_RECORD_WINDOW_HOURS = 24

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_NOTIFICATION_WORKERS = 2

EARLY_DEPARTURE_NOTE = "Early departure before 7:00 PM IST."
FACE_CHECKIN_DEFAULT_NOTE = "Check-in via web application with dual face and location verification"
