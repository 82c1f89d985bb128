"""Config flow for the SimpliSafe (mobile API) integration."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any
import uuid

import voluptuous as vol

from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import (
    AuthenticationError,
    LoginRequest,
    ProtocolError,
    SimpliSafeApi,
    TransportError,
    parse_login_response,
)
from .const import DOMAIN, LOGGER, LOGIN_RETURN_CODE_INVALID

STEP_USER_CREDENTIALS_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_USERNAME): str,
        vol.Required(CONF_PASSWORD): str,
    }
)
STEP_REAUTH_SCHEMA = vol.Schema({vol.Required(CONF_PASSWORD): str})


class SimpliSafeConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for SimpliSafe."""

    VERSION = 1

    _username: str | None = None

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input:
            username = user_input[CONF_USERNAME]
            await self.async_set_unique_id(username.lower())
            self._abort_if_unique_id_configured()
            if not (error := await self._async_validate(username, user_input[CONF_PASSWORD])):
                return self.async_create_entry(
                    title=f"SimpliSafe ({username})",
                    data={
                        CONF_USERNAME: username,
                        CONF_PASSWORD: user_input[CONF_PASSWORD],
                    },
                )
            errors["base"] = error

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_CREDENTIALS_SCHEMA,
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Handle a reauthorization request after the credentials were rejected."""
        self._username = entry_data[CONF_USERNAME]
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new password."""
        errors: dict[str, str] = {}
        assert self._username
        if user_input:
            password = user_input[CONF_PASSWORD]
            if not (error := await self._async_validate(self._username, password)):
                entry = self._get_reauth_entry()
                # The update listener hands the new credentials to the controller.
                self.hass.config_entries.async_update_entry(
                    entry, data={**entry.data, CONF_PASSWORD: password}
                )
                return self.async_abort(reason="reauth_successful")
            errors["base"] = error

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=STEP_REAUTH_SCHEMA,
            description_placeholders={CONF_USERNAME: self._username},
            errors=errors,
        )

    async def _async_validate(self, username: str, password: str) -> str | None:
        """Log in once and return an error key, or None when it worked."""
        api = SimpliSafeApi(async_get_clientsession(self.hass))
        request = LoginRequest(
            username=username, password=password, device_uuid=str(uuid.uuid4())
        )
        try:
            response = await api.async_send(request)
            if response.status == HTTPStatus.UNAUTHORIZED:
                raise AuthenticationError("Login rejected")
            if response.status != HTTPStatus.OK:
                raise TransportError(f"Unexpected status code {response.status}")
            result = parse_login_response(response.body)
            if result.return_code == LOGIN_RETURN_CODE_INVALID:
                raise AuthenticationError("Login rejected")
            if result.token is None:
                raise ProtocolError(
                    f"Unexpected login return_code {result.return_code}"
                )
        except AuthenticationError as err:
            LOGGER.error("Could not log in to SimpliSafe: %s", err)
            return "invalid_auth"
        except TransportError as err:
            LOGGER.error("Could not connect to SimpliSafe API: %s", err)
            return "cannot_connect"
        except ProtocolError as err:
            LOGGER.error("Unexpected login response from SimpliSafe: %s", err)
            return "unknown"
        return None
