"""
Admin event dispatcher.

Maps the events sent by administration clients to model operations and wraps
every outcome in a `{status, data}` envelope, whatever the socket layer in
front of it. Reads are retried while the transport fails, up to MAX_ATTEMPTS;
the attempt number is passed down to the model calls.

Main components:
- AdminDispatcher: event registry and dispatch loop
- Default handlers: user, SDI, zone, source, info type and param type reads,
  and source creation
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeAlias

from t6s_backend.core.exceptions import DataException, ModelException, RequestException, T6SException
from t6s_backend.model import InfoType, ModelEntity, ParamType, SDI, Source, User, Zone

JsonDict: TypeAlias = Dict[str, Any]
AdminHandler: TypeAlias = Callable[[JsonDict, int], Awaitable[Any]]

MAX_ATTEMPTS = 3


@dataclass
class AdminRoute:
    """How one inbound event is answered"""
    event: str
    response_event: str
    handler: AdminHandler
    retry: bool = True


def _require(payload: JsonDict, key: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise ModelException(f"The payload must contain '{key}'.")
    return value


def _require_id(payload: JsonDict, key: str) -> int:
    return _as_id(_require(payload, key), key)


def _as_id(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ModelException(f"'{key}' must be an integer id, got {value!r}.") from e


async def retrieve_user_from_token(payload: JsonDict, attempt_number: int) -> JsonDict:
    user = await User.find_one_by_token(_require(payload, "token"), attempt_number)
    return user.to_json_object()


async def retrieve_user_description(payload: JsonDict, attempt_number: int) -> JsonDict:
    user = await User.read(_require_id(payload, "userId"), attempt_number)
    return await user.to_complete_json_object(attempt_number=attempt_number)


async def retrieve_sdi_description(payload: JsonDict, attempt_number: int) -> JsonDict:
    sdi = await SDI.read(_require_id(payload, "sdiId"), attempt_number)
    return await sdi.to_complete_json_object(attempt_number=attempt_number)


async def retrieve_zone_description(payload: JsonDict, attempt_number: int) -> JsonDict:
    zone = await Zone.read(_require_id(payload, "zoneId"), attempt_number)
    return await zone.to_complete_json_object(attempt_number=attempt_number)


async def retrieve_all_source_description(payload: JsonDict, attempt_number: int) -> List[JsonDict]:
    sources = await Source.all(attempt_number)
    return await ModelEntity.complete_array_serialization(sources, attempt_number=attempt_number)


async def retrieve_all_info_type_description(payload: JsonDict, attempt_number: int) -> List[JsonDict]:
    info_types = await InfoType.all(attempt_number)
    return await ModelEntity.complete_array_serialization(info_types, attempt_number=attempt_number)


async def retrieve_all_param_type_description(payload: JsonDict, attempt_number: int) -> List[JsonDict]:
    param_types = await ParamType.all(attempt_number)
    return await ModelEntity.complete_array_serialization(param_types, attempt_number=attempt_number)


async def save_source_description(payload: JsonDict, attempt_number: int) -> JsonDict:
    """
    Create a source, attach its info type then every listed param type.

    Payload: {"name", "description", "method", "refreshTime", "isStatic",
    "infoType": id, "paramType": [ids]}
    """
    fields = {key: payload[key] for key in ("name", "description", "method", "refreshTime", "isStatic") if key in payload}
    source = Source.from_json_object(fields)
    await source.create(attempt_number)

    if payload.get("infoType") is None:
        raise DataException("A source must have a type info.", data=payload)
    info_type = await InfoType.read(_require_id(payload, "infoType"), attempt_number)
    await source.set_association("info_type", info_type, attempt_number)

    param_type_ids = payload.get("paramType")
    if param_type_ids is None:
        return source.to_json_object()
    if not isinstance(param_type_ids, list) or len(param_type_ids) == 0:
        raise DataException("ParamTypes must be a non empty array.", data=param_type_ids)

    param_types = await asyncio.gather(
        *(ParamType.read(_as_id(pid, "paramType"), attempt_number) for pid in param_type_ids)
    )
    await asyncio.gather(*(source.add("param_types", pt.id, attempt_number) for pt in param_types))
    return source.to_json_object()


DEFAULT_ROUTES = [
    AdminRoute("RetrieveUserDescriptionFromToken", "UserDescriptionFromToken", retrieve_user_from_token),
    AdminRoute("RetrieveUserDescription", "UserDescription", retrieve_user_description),
    AdminRoute("RetrieveSDIDescription", "SDIDescription", retrieve_sdi_description),
    AdminRoute("RetrieveZoneDescription", "ZoneDescription", retrieve_zone_description),
    AdminRoute("RetrieveAllSourceDescription", "AllSourceDescription", retrieve_all_source_description),
    AdminRoute("RetrieveAllInfoTypeDescription", "AllInfoTypeDescription", retrieve_all_info_type_description),
    AdminRoute("RetrieveAllParamTypeDescription", "AllParamTypeDescription", retrieve_all_param_type_description),
    AdminRoute("SaveSourceDescription", "sourceSaved", save_source_description, retry=False),
]


class AdminDispatcher:
    """Registry of admin events and their handlers"""
    _logger = logging.getLogger("AdminDispatcher")

    def __init__(self, routes: Optional[List[AdminRoute]] = None, max_attempts: int = MAX_ATTEMPTS):
        self.max_attempts = max_attempts
        self._routes: Dict[str, AdminRoute] = {}
        for route in DEFAULT_ROUTES if routes is None else routes:
            self.register(route)

    def register(self, route: AdminRoute) -> None:
        if route.event in self._routes:
            self._logger.error(f"Registration failed: event '{route.event}' already registered")
            raise ValueError(f"Event '{route.event}' already registered. Use update() to replace.")
        self._routes[route.event] = route
        self._logger.debug(f"Registered event {route.event} -> {route.response_event}")

    def update(self, route: AdminRoute) -> None:
        self._routes[route.event] = route
        self._logger.info(f"Updated event {route.event}")

    def get(self, event: str) -> Optional[AdminRoute]:
        return self._routes.get(event)

    def events(self) -> List[str]:
        return list(self._routes)

    async def dispatch(self, event: str, payload: Any = None) -> Tuple[str, JsonDict]:
        """
        Run the handler of `event`.

        Returns the response event name and the envelope to send back. Model
        errors and payloads that are not objects become error envelopes; an
        unknown event raises ModelException.
        """
        route = self._routes.get(event)
        if route is None:
            raise ModelException(f"Unknown admin event '{event}'. Available: {self.events()}")

        self._logger.debug(f"Dispatching {event}")
        try:
            data = await self._run(route, {} if payload is None else payload)
        except T6SException as e:
            self._logger.error(f"{event} failed: {e.message}")
            return route.response_event, {"status": "error", "data": e.to_json_object()}
        self._logger.debug(f"{event} answered with {route.response_event}")
        return route.response_event, {"status": "success", "data": data}

    async def _run(self, route: AdminRoute, payload: Any) -> Any:
        if not isinstance(payload, dict):
            raise ModelException("The payload must be an object.")
        attempt_number = 0
        while True:
            try:
                return await route.handler(payload, attempt_number)
            except RequestException as e:
                if not route.retry or attempt_number + 1 >= self.max_attempts:
                    raise
                attempt_number += 1
                self._logger.warning(f"{route.event}: transport failure, attempt {attempt_number + 1}: {e.message}")
