"""Async client for the lighting bridge REST API."""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Iterable

import aiohttp

from alphahue import colors, const

_LOGGER = logging.getLogger(__name__)

_WRITE_METHODS = {"POST", "PUT", "DELETE"}


class AlphaHueError(Exception):
    """Base error for bridge communication."""


class AlphaHueApiError(AlphaHueError):
    """The bridge answered with one or more error entries."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        first = errors[0] if errors else {}
        self.errors = errors
        self.error_type: int | None = first.get(const.KEY_TYPE)
        self.address: str | None = first.get(const.KEY_ADDRESS)
        self.description: str | None = first.get(const.KEY_DESCRIPTION)
        super().__init__(
            f"Bridge error {self.error_type} at {self.address}: {self.description}"
        )


def _normalize_gamma_mode(value: str | None) -> str:
    if not value:
        return const.DEFAULT_GAMMA_MODE
    mode = value.strip().lower()
    if mode in const.GAMMA_MODES:
        return mode
    _LOGGER.warning(
        "Unknown %s=%s; defaulting to %s",
        const.ENV_GAMMA_MODE,
        value,
        const.DEFAULT_GAMMA_MODE,
    )
    return const.DEFAULT_GAMMA_MODE


def _normalize_throttle_delay(value: str | None) -> float:
    if value is None or not value.strip():
        return const.DEFAULT_THROTTLE_DELAY
    try:
        delay = float(value.strip())
    except ValueError:
        delay = -1.0
    if delay >= 0:
        return delay
    _LOGGER.warning(
        "Invalid %s=%s; defaulting to %.2fs",
        const.ENV_THROTTLE_DELAY,
        value,
        const.DEFAULT_THROTTLE_DELAY,
    )
    return const.DEFAULT_THROTTLE_DELAY


def _parse_version(version: str) -> tuple[int, ...]:
    parts = []
    for part in str(version).strip().split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def _split_errors(payload: Any) -> tuple[list[dict[str, Any]], bool]:
    """Return bridge error entries and whether any success entry was present."""
    if not isinstance(payload, list):
        return [], False
    errors: list[dict[str, Any]] = []
    has_success = False
    for item in payload:
        if not isinstance(item, dict):
            continue
        error = item.get(const.KEY_ERROR)
        if isinstance(error, dict):
            errors.append(error)
        if const.KEY_SUCCESS in item:
            has_success = True
    return errors, has_success


async def _send(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    payload: Any,
    timeout: float,
) -> Any:
    _LOGGER.debug("Bridge request %s %s payload=%s", method, url, payload)
    try:
        async with session.request(
            method,
            url,
            json=payload,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            resp.raise_for_status()
            data = await resp.json(content_type=None)
    except asyncio.TimeoutError as err:
        _LOGGER.error("Bridge request %s %s timed out", method, url)
        raise AlphaHueError(f"Request to {url} timed out") from err
    except aiohttp.ClientError as err:
        _LOGGER.error("Bridge request %s %s failed: %s", method, url, err)
        raise AlphaHueError(f"Request to {url} failed: {err}") from err
    except ValueError as err:
        _LOGGER.error("Bridge returned non-JSON body for %s %s", method, url)
        raise AlphaHueError(f"Invalid JSON from {url}") from err

    _LOGGER.debug("Bridge response %s %s: %s", method, url, data)
    errors, has_success = _split_errors(data)
    if errors and not has_success:
        raise AlphaHueApiError(errors)
    if errors:
        _LOGGER.warning(
            "Bridge reported partial errors for %s %s: %s", method, url, errors
        )
    return data


class AlphaHueClient:
    """Client for a bridge reachable at ``http://{host}/api/{username}/``."""

    def __init__(
        self,
        host: str,
        username: str,
        *,
        session: aiohttp.ClientSession | None = None,
        throttle_delay: float | None = None,
        gamma_mode: str | None = None,
        request_timeout: float = const.DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._host = host
        self._username = username
        self._base_url = f"http://{host}/api/{username}/"
        self._session = session
        self._owns_session = session is None
        self._request_timeout = request_timeout

        if throttle_delay is None:
            throttle_delay = _normalize_throttle_delay(
                os.getenv(const.ENV_THROTTLE_DELAY)
            )
        self._throttle_delay = throttle_delay
        if gamma_mode is None:
            gamma_mode = os.getenv(const.ENV_GAMMA_MODE)
        self._gamma_mode = _normalize_gamma_mode(gamma_mode)

        self._write_lock = asyncio.Lock()
        self._config: dict[str, Any] = {}

    async def __aenter__(self) -> AlphaHueClient:
        try:
            await self.async_connect()
        except BaseException:
            await self.async_close()
            raise
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.async_close()

    @property
    def base_url(self) -> str:
        """Return the authenticated API base URL."""
        return self._base_url

    @property
    def gamma_mode(self) -> str:
        """Return the gamma curve used for color conversion."""
        return self._gamma_mode

    @property
    def config(self) -> dict[str, Any]:
        """Return the cached bridge configuration."""
        return self._config

    @property
    def api_version(self) -> str | None:
        """Return the bridge API version from the cached configuration."""
        return self._config.get(const.KEY_APIVERSION)

    async def async_connect(self) -> None:
        """Fetch and cache the bridge configuration."""
        await self.async_get_configuration()
        _LOGGER.debug(
            "Connected to bridge %s (api %s)", self._host, self.api_version
        )

    async def async_close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(
        self, method: str, path: str, payload: Any = None
    ) -> Any:
        """Send a request relative to the base URL, throttling writes."""
        url = f"{self._base_url}{path}"
        if method in _WRITE_METHODS:
            async with self._write_lock:
                if self._throttle_delay > 0:
                    await asyncio.sleep(self._throttle_delay)
                return await _send(
                    self._get_session(), method, url, payload, self._request_timeout
                )
        return await _send(
            self._get_session(), method, url, payload, self._request_timeout
        )

    @classmethod
    async def async_authorize(
        cls,
        host: str,
        app_name: str = const.DEFAULT_APP_NAME,
        device_name: str = const.DEFAULT_DEVICE_NAME,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float = const.DEFAULT_REQUEST_TIMEOUT,
    ) -> Any:
        """Register a new username with the bridge.

        The link button on the bridge must be pressed shortly before calling
        this. On success the response contains ``[{"success": {"username":
        ...}}]``; that username is what the client is constructed with.
        """
        payload = {const.KEY_DEVICETYPE: f"{app_name}:{device_name}"}
        url = f"http://{host}/api"
        if session is not None:
            return await _send(session, "POST", url, payload, request_timeout)
        async with aiohttp.ClientSession() as own_session:
            return await _send(own_session, "POST", url, payload, request_timeout)

    # Configuration

    async def async_get_configuration(self) -> dict[str, Any]:
        """Fetch the bridge configuration and cache it."""
        config = await self._request("GET", const.PATH_CONFIG)
        self._config = config if isinstance(config, dict) else {}
        return self._config

    async def async_get_timezones(self) -> Any:
        """Return all timezones the bridge supports."""
        return await self._request("GET", const.PATH_TIMEZONES)

    def compatible(self, min_version: str, max_version: str | None = None) -> bool:
        """Return whether the bridge API version is within the inclusive range."""
        if not self.api_version:
            return False
        current = _parse_version(self.api_version)
        if current < _parse_version(min_version):
            return False
        if max_version and current > _parse_version(max_version):
            return False
        return True

    # Lights

    async def async_toggle_power(self, light_id: int | str, on: bool = True) -> Any:
        """Turn a light on or off."""
        return await self.async_set_light_state(light_id, {const.KEY_ON: on})

    async def async_get_light_ids(self) -> list[str]:
        """Return the IDs of all lights known to the bridge."""
        lights = await self._request("GET", const.PATH_LIGHTS)
        return list(lights) if isinstance(lights, dict) else []

    async def async_get_light_on_status(self, light_id: int | str) -> bool:
        """Return whether a light is on."""
        light = await self.async_get_light_state(light_id)
        return bool(light.get(const.KEY_STATE, {}).get(const.KEY_ON, False))

    async def async_get_light_state(self, light_id: int | str) -> dict[str, Any]:
        """Return the attributes and state of a light."""
        return await self._request("GET", f"{const.PATH_LIGHTS}/{light_id}")

    async def async_set_light_state(
        self, light_id: int | str, state: dict[str, Any]
    ) -> Any:
        """Update the state of a light (on, bri, hue, sat, xy, ct, alert, ...)."""
        return await self._request(
            "PUT", f"{const.PATH_LIGHTS}/{light_id}/state", state
        )

    async def async_set_light_to_hex(self, light_id: int | str, hex_color: str) -> Any:
        """Set a light's color from a hex string."""
        point = colors.xy_from_hex(hex_color, self._gamma_mode)
        return await self.async_set_light_state(light_id, {const.KEY_XY: list(point)})

    async def async_set_light_to_rgb(
        self, light_id: int | str, rgb: colors.RGBLike
    ) -> Any:
        """Set a light's color from an RGB triple."""
        point = colors.xy_from_rgb(rgb, self._gamma_mode)
        return await self.async_set_light_state(light_id, {const.KEY_XY: list(point)})

    async def async_set_light_attributes(
        self, light_id: int | str, attributes: dict[str, Any]
    ) -> Any:
        """Update light attributes such as its name."""
        return await self._request(
            "PUT", f"{const.PATH_LIGHTS}/{light_id}", attributes
        )

    async def async_delete_light(self, light_id: int | str) -> Any:
        """Remove a light from the bridge."""
        return await self._request("DELETE", f"{const.PATH_LIGHTS}/{light_id}")

    async def async_search_new_devices(self) -> Any:
        """Start a search for new lights and switches."""
        return await self._request("POST", const.PATH_LIGHTS)

    # Groups

    async def async_get_groups(self) -> Any:
        """Return all groups."""
        return await self._request("GET", const.PATH_GROUPS)

    async def async_create_group(
        self,
        name: str,
        lights: Iterable[int | str],
        group_type: str = const.GROUP_TYPE_LIGHT_GROUP,
        room_class: str = const.DEFAULT_ROOM_CLASS,
    ) -> Any:
        """Create a group.

        Bridges older than API 1.11 only know plain light groups, so the type
        and room class are omitted for them. Unknown room classes become
        ``Other``.
        """
        if not self._config:
            await self.async_get_configuration()
        params: dict[str, Any] = {const.KEY_NAME: name}
        if self.compatible(const.ROOM_MIN_API_VERSION):
            is_room = group_type == const.GROUP_TYPE_ROOM
            params[const.KEY_TYPE] = (
                const.GROUP_TYPE_ROOM if is_room else const.GROUP_TYPE_LIGHT_GROUP
            )
            if is_room:
                if room_class not in const.ROOM_CLASSES:
                    _LOGGER.debug(
                        "Unknown room class %r; using %s",
                        room_class,
                        const.DEFAULT_ROOM_CLASS,
                    )
                    room_class = const.DEFAULT_ROOM_CLASS
                params[const.KEY_CLASS] = room_class
        # The bridge rejects numeric light IDs.
        params[const.KEY_LIGHTS] = [str(light_id) for light_id in lights]
        return await self._request("POST", const.PATH_GROUPS, params)

    async def async_set_group_attributes(
        self, group_id: int | str, attributes: dict[str, Any]
    ) -> Any:
        """Update group attributes such as name, lights or room class."""
        return await self._request(
            "PUT", f"{const.PATH_GROUPS}/{group_id}", attributes
        )

    async def async_delete_group(self, group_id: int | str) -> Any:
        """Delete a group."""
        return await self._request("DELETE", f"{const.PATH_GROUPS}/{group_id}")

    async def async_set_group_state(
        self, group_id: int | str, state: dict[str, Any]
    ) -> Any:
        """Update all lights in a group. Group 0 addresses every light."""
        return await self._request(
            "PUT", f"{const.PATH_GROUPS}/{group_id}/action", state
        )

    async def async_set_group_to_hex(self, group_id: int | str, hex_color: str) -> Any:
        """Set every light in a group to a hex color."""
        point = colors.xy_from_hex(hex_color, self._gamma_mode)
        return await self.async_set_group_state(group_id, {const.KEY_XY: list(point)})

    async def async_set_group_to_rgb(
        self, group_id: int | str, rgb: colors.RGBLike
    ) -> Any:
        """Set every light in a group to an RGB color."""
        point = colors.xy_from_rgb(rgb, self._gamma_mode)
        return await self.async_set_group_state(group_id, {const.KEY_XY: list(point)})

    # Sensors

    async def async_get_sensors(self) -> Any:
        """Return all sensors added to the bridge."""
        return await self._request("GET", const.PATH_SENSORS)

    # Rules

    async def async_get_rules(self) -> Any:
        """Return all rules."""
        return await self._request("GET", const.PATH_RULES)

    async def async_get_rule(self, rule_id: int | str) -> Any:
        """Return a single rule."""
        return await self._request("GET", f"{const.PATH_RULES}/{rule_id}")

    async def async_create_rule(
        self,
        name: str,
        conditions: list[dict[str, Any]],
        actions: list[dict[str, Any]],
    ) -> Any:
        """Create a rule; all conditions must hold for the actions to run."""
        params = {
            const.KEY_NAME: name,
            const.KEY_CONDITIONS: conditions,
            const.KEY_ACTIONS: actions,
        }
        return await self._request("POST", const.PATH_RULES, params)

    async def async_update_rule(
        self, rule_id: int | str, attributes: dict[str, Any]
    ) -> Any:
        """Update a rule's name, conditions or actions."""
        return await self._request(
            "PUT", f"{const.PATH_RULES}/{rule_id}", attributes
        )

    async def async_delete_rule(self, rule_id: int | str) -> Any:
        """Delete a rule."""
        return await self._request("DELETE", f"{const.PATH_RULES}/{rule_id}")

    # Schedules

    async def async_get_schedules(self) -> Any:
        """Return all schedules."""
        return await self._request("GET", const.PATH_SCHEDULES)

    async def async_get_schedule(self, schedule_id: int | str) -> Any:
        """Return a single schedule."""
        return await self._request("GET", f"{const.PATH_SCHEDULES}/{schedule_id}")

    async def async_create_schedule(self, attributes: dict[str, Any]) -> Any:
        """Create a schedule (name, description, command, localtime, status, ...)."""
        return await self._request("POST", const.PATH_SCHEDULES, attributes)

    async def async_set_schedule(
        self, schedule_id: int | str, attributes: dict[str, Any]
    ) -> Any:
        """Update an existing schedule."""
        return await self._request(
            "PUT", f"{const.PATH_SCHEDULES}/{schedule_id}", attributes
        )

    async def async_delete_schedule(self, schedule_id: int | str) -> Any:
        """Delete a schedule."""
        return await self._request(
            "DELETE", f"{const.PATH_SCHEDULES}/{schedule_id}"
        )
