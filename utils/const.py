CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "*",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

API_PASSWORD_HEADER = "X-API-Password"

ARCHIVAL_LOCK_KEY = "analytics:lock:archival"
TRIM_LOCK_KEY = "analytics:lock:trim"

SCHEDULER_LOCK_KEY = "analytics:lock:scheduler"
SCHEDULER_HEARTBEAT_KEY = "analytics:scheduler:heartbeat"
