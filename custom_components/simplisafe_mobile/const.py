"""Constants for the SimpliSafe (mobile API) integration."""

import datetime
import logging
from typing import Final

DOMAIN = "simplisafe_mobile"

API_BASE_URL = "https://simplisafe.com"
API_LOGIN_PATH = "/mobile/login"
API_LOCATIONS_PATH = "/mobile/{uid}/locations"
API_GET_STATE_PATH = "/mobile/{uid}/sid/{location}/get-state"
API_SET_STATE_PATH = "/mobile/{uid}/sid/{location}/set-state"
API_DEVICE_NAME = "Home Assistant"
API_VERSION = "1200"

LOGIN_RETURN_CODE_INVALID = 0
LOGIN_RETURN_CODE_SUCCESS = 1

RESPONSE_CODE_OFF = 2
RESPONSE_CODE_HOME = 4
RESPONSE_CODE_AWAY = 5

LOGGER = logging.getLogger(DOMAIN)

UPDATE_INTERVAL: Final = datetime.timedelta(seconds=10)
REQUEST_TIMEOUT = 10

SIGNAL_NEW_BASE_STATION = f"{DOMAIN}_new_base_station_{{}}"
MANUFACTURER = "SimpliSafe"
