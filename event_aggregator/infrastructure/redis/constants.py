# Per-group event lists, newest first
EVENTS_LIST = "events:{user_id}:{event_type}"
EVENTS_SCAN_ALL = "events:*"
EVENTS_SCAN_USER = "events:{user_id}:*"
EVENTS_SCAN_TYPE = "events:*:{event_type}"

KEY_SEPARATOR = ":"
KEY_SEGMENTS = 3
