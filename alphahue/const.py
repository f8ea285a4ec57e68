"""Constants for the AlphaHue bridge client."""

DEFAULT_APP_NAME = "AlphaHue"
DEFAULT_DEVICE_NAME = "myServer"
DEFAULT_REQUEST_TIMEOUT = 10.0
# The bridge drops updates that arrive too quickly.
DEFAULT_THROTTLE_DELAY = 0.25

ENV_GAMMA_MODE = "ALPHAHUE_GAMMA_MODE"
ENV_THROTTLE_DELAY = "ALPHAHUE_THROTTLE_DELAY"

GAMMA_MODE_SRGB = "srgb"
GAMMA_MODE_LEGACY = "legacy"
GAMMA_MODES = {GAMMA_MODE_SRGB, GAMMA_MODE_LEGACY}
DEFAULT_GAMMA_MODE = GAMMA_MODE_SRGB

MIN_CHANNEL = 0
MAX_CHANNEL = 255

# Linear RGB -> CIE XYZ (D50 white point).
RGB_TO_XYZ = (
    (0.4360747, 0.3850649, 0.0930804),
    (0.2225045, 0.7168786, 0.0406169),
    (0.0139322, 0.0971045, 0.7141733),
)

PATH_CONFIG = "config"
PATH_TIMEZONES = "info/timezones"
PATH_LIGHTS = "lights"
PATH_GROUPS = "groups"
PATH_SENSORS = "sensors"
PATH_RULES = "rules"
PATH_SCHEDULES = "schedules"

KEY_ACTIONS = "actions"
KEY_ADDRESS = "address"
KEY_APIVERSION = "apiversion"
KEY_CLASS = "class"
KEY_CONDITIONS = "conditions"
KEY_DESCRIPTION = "description"
KEY_DEVICETYPE = "devicetype"
KEY_ERROR = "error"
KEY_LIGHTS = "lights"
KEY_NAME = "name"
KEY_ON = "on"
KEY_STATE = "state"
KEY_SUCCESS = "success"
KEY_TYPE = "type"
KEY_XY = "xy"

GROUP_TYPE_LIGHT_GROUP = "LightGroup"
GROUP_TYPE_ROOM = "Room"
# Room groups and room classes need API 1.11 or newer.
ROOM_MIN_API_VERSION = "1.11.0"
DEFAULT_ROOM_CLASS = "Other"
ROOM_CLASSES = (
    "Living room",
    "Kitchen",
    "Dining",
    "Bedroom",
    "Kids Bedroom",
    "Bathroom",
    "Nursery",
    "Recreation",
    "Office",
    "Gym",
    "Hallway",
    "Toilet",
    "Front Door",
    "Garage",
    "Terrace",
    "Garden",
    "Driveway",
    "Carport",
    "Other",
)
