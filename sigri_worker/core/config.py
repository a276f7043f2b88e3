from datetime import datetime, timezone

# Portal
LOGIN_URL = "https://mapa.onr.org.br/sigri/login-usuario"
MAP_URL = "https://mapa.onr.org.br"
CERT_ORIGIN = "https://mapa.onr.org.br"

# Timeouts (milliseconds)
ACTION_TIMEOUT_MS = 20_000
LOGIN_ACTION_TIMEOUT_MS = 15_000
SUGGESTION_TIMEOUT_MS = 5_000
OPTION_CLICK_TIMEOUT_MS = 10_000

# Settle delays for client-side rendering (milliseconds)
LOGIN_SETTLE_MS = 3_000
MAP_SETTLE_MS = 5_000
SCOPE_SETTLE_MS = 800
INPUT_SETTLE_MS = 1_500
SEARCH_SETTLE_MS = 6_000
FEATURE_SETTLE_MS = 3_000
LAYERS_SETTLE_MS = 800

# Map feature selection point (viewport coordinates)
FEATURE_CLICK_X = 800
FEATURE_CLICK_Y = 450

# Artifact storage
ARTIFACT_SUBDIR = "onr-sigri"
ARTIFACT_EXTENSION = ".kmz"
ARTIFACT_CONTENT_TYPE = "application/vnd.google-earth.kmz"
DOCUMENT_TYPE = "ONR_SIGRI_POLIGONO"
RESULT_SOURCE = "ONR_SIGRI"

BROWSER_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
