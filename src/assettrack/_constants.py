"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Store keys (one independently persisted collection per key)
# ------------------------------------------------------------------

ASSETS_KEY = "dc.assets"
TRACKERS_KEY = "dc.trackers"
LINKS_KEY = "dc.links"
TRACKER_POSITIONS_KEY = "dc.trackerPositions"
TRACKING_LOGS_KEY = "dc.trackingLogs"

STORE_KEYS: tuple[str, ...] = (
    ASSETS_KEY,
    TRACKERS_KEY,
    LINKS_KEY,
    TRACKER_POSITIONS_KEY,
    TRACKING_LOGS_KEY,
)

DEFAULT_HISTORY_LIMIT = 500
DEFAULT_WRAPPER_KEYS: tuple[str, ...] = ("Output",)
DEFAULT_STORE_PATH = "assettrack.json"

DEFAULT_ASSET_NAME = "Asset"
DEFAULT_TRACKER_NAME = "Tracker"

# ------------------------------------------------------------------
# Payload key aliases, consulted in order.
# A tuple entry is a nested path, e.g. ("tracker", "id") -> payload["tracker"]["id"].
# ------------------------------------------------------------------

FieldAlias = str | tuple[str, ...]

ASSET_ID_ALIASES: tuple[FieldAlias, ...] = ("ID", "Asset ID", "assetId", "asset_id", ("asset", "id"))
ASSET_NAME_ALIASES: tuple[FieldAlias, ...] = ("Asset Name", "assetName", ("asset", "name"), "asset_name")
ASSET_STATUS_ALIASES: tuple[FieldAlias, ...] = ("Asset Status", "assetStatus", "asset_status", ("asset", "status"))

TRACKER_ID_ALIASES: tuple[FieldAlias, ...] = ("trackerId", "Tracker ID", "deviceId", ("tracker", "id"))
TRACKER_NAME_ALIASES: tuple[FieldAlias, ...] = ("GPS Tracker Name", "trackerName", ("tracker", "name"), "deviceName")
TRACKER_STATUS_ALIASES: tuple[FieldAlias, ...] = ("GPS Tracker Status", "trackerStatus", ("tracker", "status"))
BATTERY_ALIASES: tuple[FieldAlias, ...] = (
    "GPS Tracker Battery",
    "battery",
    "batteryLevel",
    ("tracker", "battery"),
)

LATITUDE_ALIASES: tuple[FieldAlias, ...] = ("Latitude", "latitude", "lat")
LONGITUDE_ALIASES: tuple[FieldAlias, ...] = ("Longitude", "longitude", "lng", "long", "lon")
LINK_STATUS_ALIASES: tuple[FieldAlias, ...] = ("Tracking Status", "linkStatus", "status")
TIMESTAMP_ALIASES: tuple[FieldAlias, ...] = ("timestamp",)
