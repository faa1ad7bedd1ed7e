"""
Windy Observations Constants

Plugin identity, provider endpoints and timing defaults shared across the
package. Runtime-tunable values are mirrored in ``config.py``; the values
here are their defaults.
"""

# =============================================================================
# Plugin Identity
# =============================================================================

PLUGIN_ID = "windy-observations"
PLUGIN_NAME = "Windy Observations"

USER_AGENT = "SignalK Windy Observations Plugin"

# =============================================================================
# Provider Endpoints
# =============================================================================

WINDY_STATIONS_URL = "https://node.windy.com/pois/stations"
WINDY_INFO_URL = "https://www.windy.com/station"

# =============================================================================
# Signal K
# =============================================================================

OBSERVATIONS_KEY = "observations.windy"
SIGNALK_URL = "http://localhost:3000"
SIGNALK_CONTEXT = "vessels.self"
POSITION_PATH = "navigation.position"

# =============================================================================
# Discovery and Timing
# =============================================================================

ZOOM_LEVEL = 8
WARMUP_DELAY_SEC = 5.0               # Position data is not available right at start
POLL_INTERVAL_SEC = 15 * 60.0
REQUEST_TIMEOUT_SEC = 15.0
