"""Constants used by the SmartThings HomeKit bridge."""

from typing import Final

DOMAIN: Final = "smartthings_homekit"

# #### Config ####
CONF_ACCESS_TOKEN: Final = "access_token"
CONF_NAME: Final = "name"
CONF_PORT: Final = "port"
CONF_PERSIST_FILE: Final = "persist_file"
CONF_POLL_LIGHTS: Final = "poll_switches_and_lights_seconds"
CONF_POLL_SENSORS: Final = "poll_sensors_seconds"
CONF_COMMAND_TIMEOUT: Final = "command_timeout"
CONF_STATUS_MAX_AGE: Final = "status_max_age"
CONF_EXCLUDE_DEVICES: Final = "exclude_devices"

# #### Defaults ####
DEFAULT_NAME: Final = "SmartThings"
DEFAULT_PORT: Final = 51826
DEFAULT_PERSIST_FILE: Final = "smartthings_homekit.state"
DEFAULT_POLL_LIGHTS: Final = 10
DEFAULT_POLL_SENSORS: Final = 5
DEFAULT_COMMAND_TIMEOUT: Final = 10.0
DEFAULT_STATUS_MAX_AGE: Final = 1.0

# #### SmartThings API ####
API_BASE: Final = "https://api.smartthings.com/v1"
COMPONENT_MAIN: Final = "main"
HEALTH_ONLINE: Final = "ONLINE"

# #### Capabilities ####
CAPABILITY_SWITCH: Final = "switch"
CAPABILITY_SWITCH_LEVEL: Final = "switchLevel"
CAPABILITY_COLOR_TEMPERATURE: Final = "colorTemperature"
CAPABILITY_COLOR_CONTROL: Final = "colorControl"
CAPABILITY_ILLUMINANCE: Final = "illuminanceMeasurement"

# #### Attributes ####
ATTR_SWITCH: Final = "switch"
ATTR_LEVEL: Final = "level"
ATTR_COLOR_TEMPERATURE: Final = "colorTemperature"
ATTR_HUE: Final = "hue"
ATTR_SATURATION: Final = "saturation"
ATTR_ILLUMINANCE: Final = "illuminance"
ATTR_VALUE: Final = "value"
ATTR_TIMESTAMP: Final = "timestamp"

# #### Commands ####
COMMAND_ON: Final = "on"
COMMAND_OFF: Final = "off"
COMMAND_SET_LEVEL: Final = "setLevel"
COMMAND_SET_COLOR_TEMPERATURE: Final = "setColorTemperature"
COMMAND_SET_COLOR: Final = "setColor"

STATE_ON: Final = "on"

# #### Services ####
SERV_LIGHTBULB: Final = "Lightbulb"
SERV_LIGHT_SENSOR: Final = "LightSensor"

# #### Characteristics ####
CHAR_ON: Final = "On"
CHAR_BRIGHTNESS: Final = "Brightness"
CHAR_COLOR_TEMPERATURE: Final = "ColorTemperature"
CHAR_HUE: Final = "Hue"
CHAR_SATURATION: Final = "Saturation"
CHAR_CURRENT_AMBIENT_LIGHT_LEVEL: Final = "CurrentAmbientLightLevel"

# #### Properties ####
PROP_MIN_VALUE: Final = "minValue"
PROP_MAX_VALUE: Final = "maxValue"

# SmartThings accepts 2200K..9000K, HomeKit shows it as 110..454 mired.
MIN_COLOR_TEMP_KELVIN: Final = 2200
MAX_COLOR_TEMP_KELVIN: Final = 9000
MIN_COLOR_TEMP_MIRED: Final = 110
MAX_COLOR_TEMP_MIRED: Final = 454

MANUFACTURER: Final = "SmartThings"
