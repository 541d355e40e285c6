"""Fixed refresh cadence and window sizes.

The polling interval is part of the server contract and is intentionally not
exposed as a setting.
"""

REFRESH_INTERVAL_SECONDS = 30.0

# Chart trailing window (K)
CHART_WINDOW_SIZE = 20

# Dashboard feed: first N online clients, per-client limit, merged top M
DASHBOARD_MAX_CLIENTS = 3
DASHBOARD_PER_CLIENT_LIMIT = 10
DASHBOARD_RECENT_LIMIT = 10

# Client details page
DETAIL_REQUEST_LIMIT = 100
RECENT_ACTIVITY_LIMIT = 5

DEFAULT_CONFIG_FILE_NAME = "client.json"
