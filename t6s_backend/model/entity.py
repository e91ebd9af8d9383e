############################################################
# entity.py
############################################################

"""
Remote Entity Engine

Every domain object of the backend is persisted on a REST resource server and
inherits its behaviour from ModelEntity. Key concepts:

1. PERSISTENCE CORE:
   - `create`, `read`, `update`, `delete` and `all` each issue exactly one
     request and interpret exactly one `{status, data}` envelope
   - `id` is None until a create succeeds and goes back to None after a delete

2. ASSOCIATIONS:
   - Kinds declare slots with `One(...)` or `Many(...)` in `associations`
   - Slots are loaded lazily and cached until `desynchronize()` is called
   - `load_associations()` fans out one request per slot and joins them once
   - Concurrent loads of the same slot share a single request

3. PROJECTION:
   - `to_json_object()` is a pure dump of the entity's own fields
   - `to_complete_json_object()` loads every slot then adds one level of
     shallow projections, never more, so cyclic relations terminate

4. COMPLETENESS:
   - `check_completeness()` combines the cheap local checks (id, mandatory
     fields) with the `complete` flag of every mandatory related entity

5. ERRORS:
   - ModelException before any request, RequestException when the transport
     fails, ResponseException for a non-success envelope and DataException
     for a malformed success payload

Example Usage:
```python
call_type = CallType(name="RSS", description="feed")
await call_type.create()
await call_type.set_association("zone", await Zone.read(3))
data = await call_type.to_complete_json_object()
```
"""

import asyncio
import json
import logging
from typing import (
    Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Type, TypeVar, Union
)

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError
from pydantic.alias_generators import to_camel

from t6s_backend.core.config import DatabaseConnection
from t6s_backend.core.exceptions import (
    DataException, ModelException, RequestException, ResponseException
)
from t6s_backend.core.rest_client import RestClientError, RestClientResponse
from t6s_backend.model.association import Association, SlotState
from t6s_backend.model.registry import ModelRegistry

logger = logging.getLogger("ModelEntity")

T_Entity = TypeVar("T_Entity", bound="ModelEntity")
KindRef = Union[Type["ModelEntity"], str]

_NO_BODY = object()

# Keys the server owns and which are never sent on create
SERVER_KEYS = ("id", "createdAt", "updatedAt")

# Prefixes accepted by update_attribute
ATTRIBUTE_METHODS = ("set_", "link_", "unlink_", "add_", "remove_")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def _resource(kind: Optional[KindRef]) -> Optional[str]:
    if kind is None:
        return None
    if isinstance(kind, str):
        return kind
    return kind.table_name


class ModelEntity(BaseModel):
    """
    Base class of every entity stored on the resource server.

    Subclasses set `table_name` (the resource name used in URLs), list their
    mandatory scalar fields in `required_fields` and declare their relations
    in `associations`.

    Attributes:
        id: Server identity, None until created
        complete: Whether the entity and its mandatory relations are fully specified
        created_at: Creation timestamp as reported by the server
        updated_at: Last update timestamp as reported by the server
    """
    table_name: ClassVar[str] = ""
    required_fields: ClassVar[Tuple[str, ...]] = ()
    associations: ClassVar[Dict[str, Association]] = {}

    id: Optional[int] = None
    complete: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    _slots: Dict[str, SlotState] = PrivateAttr(default_factory=dict)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        for name in cls.associations:
            if name in cls.model_fields:
                raise TypeError(f"{cls.__name__}: association '{name}' shadows a field")
        if "table_name" in cls.__dict__ and cls.table_name:
            ModelRegistry.register_kind(cls)

    def model_post_init(self, __context: Any) -> None:
        self._slots = {name: SlotState(spec) for name, spec in self.associations.items()}

    def __repr__(self) -> str:
        """Only the kind and the id, related entities may point back to this one."""
        return f"{type(self).__name__}({self.id})"

    def identity(self) -> Tuple[str, Optional[int]]:
        return (self.table_name, self.id)

    ##############################
    # Envelope interpretation
    ##############################

    @staticmethod
    async def _call(
        verb: str,
        url: str,
        action: str,
        body: Any = _NO_BODY,
        attempt_number: int = 0,
    ) -> RestClientResponse:
        """Send one request and keep only envelopes whose status is a success."""
        client = ModelRegistry.get_client()
        logger.debug(f"{verb} {url} to {action}")
        try:
            if verb == "GET":
                response = await client.get(url)
            elif verb == "POST":
                response = await client.post(url, body)
            elif verb == "PUT":
                response = await client.put(url, body)
            elif verb == "DELETE":
                response = await client.delete(url)
            else:
                raise ModelException(f"Unsupported verb {verb}", attempt_number)
        except RestClientError as e:
            raise RequestException(
                f"The request failed when trying to {action} with URL: {url}.\n"
                f"Code: {e.status_code}\nMessage: {e.response if e.response is not None else e}",
                url,
                cause=e,
                status_code=e.status_code,
                response=e.response,
                attempt_number=attempt_number,
            ) from e

        if response.status() != "success":
            raise ResponseException(
                f"The server did not accept the request to {action} with URL: {url}.\n"
                f"Response: {json.dumps(response.body, default=str)}",
                url,
                envelope=response.body,
                attempt_number=attempt_number,
            )
        return response

    @staticmethod
    def _expect_object(response: RestClientResponse, url: str, action: str, attempt_number: int) -> Dict[str, Any]:
        data = response.data()
        if not isinstance(data, dict) or not data or data.get("id") is None:
            raise DataException(
                f"The response is a success but the data appears to be empty or does not have "
                f"the right signature when trying to {action} with URL: {url}",
                url,
                data=data,
                attempt_number=attempt_number,
            )
        return data

    @staticmethod
    def _expect_array(
        response: RestClientResponse,
        model_class: Type[T_Entity],
        url: str,
        action: str,
        attempt_number: int,
    ) -> List[T_Entity]:
        data = response.data()
        if not isinstance(data, list):
            raise DataException(
                f"The data appears to be empty or is not an array when trying to {action} with URL: {url}",
                url,
                data=data,
                attempt_number=attempt_number,
            )
        entities = []
        for item in data:
            if not isinstance(item, dict) or item.get("id") is None:
                raise DataException(
                    f"One data does not have any ID when trying to {action} with URL: {url}",
                    url,
                    data=data,
                    attempt_number=attempt_number,
                )
            entities.append(model_class.from_json_object(item, url=url))
        return entities

    def _apply_server_fields(self, data: Dict[str, Any], url: str, *keys: str) -> None:
        try:
            for key in keys:
                if key == "id":
                    self.id = data["id"]
                elif key == "createdAt":
                    self.created_at = data.get("createdAt")
                elif key == "updatedAt":
                    self.updated_at = data.get("updatedAt")
        except ValidationError as e:
            raise DataException(f"Invalid server fields from {url}: {e}", url, data=data) from e

    ##############################
    # Persistence core
    ##############################

    async def create_object(
        self,
        model_class: Optional[Type["ModelEntity"]],
        data: Optional[Dict[str, Any]],
        attempt_number: int = 0,
    ) -> None:
        """POST the given data and take the id assigned by the server."""
        if model_class is None or data is None:
            raise ModelException("To create an object, the modelClass and the datas must be given.", attempt_number)
        if self.id is not None:
            raise ModelException(
                f"Trying to create an already existing object with ID: {self.id}.", attempt_number
            )

        payload = {key: value for key, value in data.items() if key not in SERVER_KEYS}
        url = DatabaseConnection.model_endpoint(model_class.table_name)
        response = await self._call("POST", url, "create an object", payload, attempt_number)
        created = self._expect_object(response, url, "create an object", attempt_number)
        self._apply_server_fields(created, url, "id", "createdAt", "updatedAt")
        logger.info(f"Created {type(self).__name__}({self.id})")

    @staticmethod
    async def read_object(
        model_class: Optional[Type[T_Entity]],
        object_id: Optional[int],
        attempt_number: int = 0,
    ) -> T_Entity:
        if model_class is None or object_id is None:
            raise ModelException("To read an object, the modelClass and the object ID must be given.", attempt_number)

        url = DatabaseConnection.object_endpoint(model_class.table_name, object_id)
        response = await ModelEntity._call("GET", url, "read an object", attempt_number=attempt_number)
        data = ModelEntity._expect_object(response, url, "read an object", attempt_number)
        return model_class.from_json_object(data, url=url)

    async def update_object(
        self,
        model_class: Optional[Type["ModelEntity"]],
        data: Optional[Dict[str, Any]],
        attempt_number: int = 0,
    ) -> None:
        if model_class is None or data is None:
            raise ModelException("To update an object, the modelClass and the datas must be given.", attempt_number)
        if self.id is None:
            raise ModelException(
                "The object does not exist yet. It can't be updated, create it first.", attempt_number
            )

        url = DatabaseConnection.object_endpoint(model_class.table_name, self.id)
        response = await self._call("PUT", url, "update an object", data, attempt_number)
        updated = self._expect_object(response, url, "update an object", attempt_number)
        self._apply_server_fields(updated, url, "updatedAt")
        logger.info(f"Updated {type(self).__name__}({self.id})")

    async def delete_object(self, model_class: Optional[Type["ModelEntity"]], attempt_number: int = 0) -> None:
        if model_class is None:
            raise ModelException("To delete an object, the modelClass must be given.", attempt_number)
        if self.id is None:
            raise ModelException("The object does not exist yet. It can't be deleted.", attempt_number)

        url = DatabaseConnection.object_endpoint(model_class.table_name, self.id)
        await self._call("DELETE", url, "delete an object", attempt_number=attempt_number)
        logger.info(f"Deleted {type(self).__name__}({self.id})")
        self.id = None

    @staticmethod
    async def all_objects(model_class: Optional[Type[T_Entity]], attempt_number: int = 0) -> List[T_Entity]:
        if model_class is None:
            raise ModelException("To retrieve all objects, the modelClass must be given.", attempt_number)

        url = DatabaseConnection.model_endpoint(model_class.table_name)
        response = await ModelEntity._call("GET", url, "retrieve all objects", attempt_number=attempt_number)
        return ModelEntity._expect_array(response, model_class, url, "retrieve all objects", attempt_number)

    # Shortcuts bound to the calling kind

    async def create(self, attempt_number: int = 0) -> None:
        await self.create_object(type(self), self.to_json_object(), attempt_number)

    @classmethod
    async def read(cls: Type[T_Entity], object_id: int, attempt_number: int = 0) -> T_Entity:
        return await ModelEntity.read_object(cls, object_id, attempt_number)

    async def update(self, attempt_number: int = 0) -> None:
        await self.update_object(type(self), self.to_json_object(), attempt_number)

    async def delete(self, attempt_number: int = 0) -> None:
        await self.delete_object(type(self), attempt_number)

    @classmethod
    async def all(cls: Type[T_Entity], attempt_number: int = 0) -> List[T_Entity]:
        return await ModelEntity.all_objects(cls, attempt_number)

    ##############################
    # Search
    ##############################

    @classmethod
    async def find_by(cls: Type[T_Entity], param_name: str, param_value: Any, attempt_number: int = 0) -> List[T_Entity]:
        """All objects of this kind whose `param_name` equals `param_value`."""
        if not cls.table_name or _is_empty(param_name) or param_value is None:
            raise ModelException(
                "To find an object the modelClass, the paramName and the paramValue must be given.", attempt_number
            )

        url = DatabaseConnection.search_endpoint(cls.table_name, param_name, param_value)
        response = await cls._call("GET", url, "search objects", attempt_number=attempt_number)
        return cls._expect_array(response, cls, url, "search objects", attempt_number)

    @classmethod
    async def find_one_by(cls: Type[T_Entity], param_name: str, param_value: Any, attempt_number: int = 0) -> T_Entity:
        """Like find_by but exactly one object must match."""
        found = await cls.find_by(param_name, param_value, attempt_number)
        url = DatabaseConnection.search_endpoint(cls.table_name, param_name, param_value)
        if len(found) == 0:
            raise DataException(f"No object was found with URL: {url}", url, data=[], attempt_number=attempt_number)
        if len(found) > 1:
            raise DataException(
                f"More than one object was found with URL: {url}",
                url,
                data=[entity.to_json_object() for entity in found],
                attempt_number=attempt_number,
            )
        return found[0]

    ##############################
    # Association resolver
    ##############################

    def _check_association_args(
        self,
        model_class: Optional[KindRef],
        associated_class: Optional[KindRef],
        attempt_number: int,
        action: str,
        associated_id: Any = _NO_BODY,
    ) -> None:
        if self.id is None:
            raise ModelException(
                f"The object does not exist yet. It is not possible to {action}.", attempt_number
            )
        if model_class is None or associated_class is None or associated_id is None:
            raise ModelException(
                f"The two modelClasses and the ID of the second object must be given to {action}.", attempt_number
            )

    async def associate_object(
        self,
        model_class: Optional[KindRef],
        associated_class: Optional[KindRef],
        associated_id: Optional[int],
        attempt_number: int = 0,
    ) -> None:
        """Join this object to `associated_id` of `associated_class`."""
        self._check_association_args(model_class, associated_class, attempt_number, "create the association", associated_id)
        url = DatabaseConnection.associated_object_endpoint(
            _resource(model_class), self.id, _resource(associated_class), associated_id
        )
        await self._call("PUT", url, "associate objects", {}, attempt_number)
        logger.debug(f"Associated {self!r} with {_resource(associated_class)}({associated_id})")

    async def delete_object_association(
        self,
        model_class: Optional[KindRef],
        associated_class: Optional[KindRef],
        associated_id: Optional[int],
        attempt_number: int = 0,
    ) -> None:
        self._check_association_args(model_class, associated_class, attempt_number, "delete the association", associated_id)
        url = DatabaseConnection.associated_object_endpoint(
            _resource(model_class), self.id, _resource(associated_class), associated_id
        )
        await self._call("DELETE", url, "delete an association", attempt_number=attempt_number)
        logger.debug(f"Dissociated {self!r} from {_resource(associated_class)}({associated_id})")

    async def get_associated_objects(
        self,
        model_class: Optional[KindRef],
        associated_class: Optional[Type[T_Entity]],
        attempt_number: int = 0,
        resource: Optional[str] = None,
        missing_as_empty: bool = False,
    ) -> List[T_Entity]:
        """
        Every object of `associated_class` related to this one, in server order.

        With `missing_as_empty`, transport and server failures resolve to an
        empty list. This mode is meant for callers outside the engine that
        only check for existence; lazy slot loads never use it.
        """
        self._check_association_args(model_class, associated_class, attempt_number, "retrieve associated objects")
        url = DatabaseConnection.association_endpoint(
            _resource(model_class), self.id, resource or associated_class.table_name
        )
        try:
            response = await self._call("GET", url, "retrieve associated objects", attempt_number=attempt_number)
            return self._expect_array(response, associated_class, url, "retrieve associated objects", attempt_number)
        except (RequestException, ResponseException, DataException) as e:
            if not missing_as_empty:
                raise
            logger.debug(f"No associated objects for {self!r} at {url}: {e.message}")
            return []

    async def get_uniquely_associated_object(
        self,
        model_class: Optional[KindRef],
        associated_class: Optional[Type[T_Entity]],
        attempt_number: int = 0,
        resource: Optional[str] = None,
        missing_as_none: bool = False,
    ) -> Optional[T_Entity]:
        """
        The single object of `associated_class` related to this one, or None.

        An empty array or an empty object means there is no related object.
        With `missing_as_none`, transport and server failures resolve to None
        too, for callers outside the engine that only check for existence.
        """
        self._check_association_args(model_class, associated_class, attempt_number, "retrieve a uniquely associated object")
        url = DatabaseConnection.association_endpoint(
            _resource(model_class), self.id, resource or associated_class.table_name
        )
        try:
            response = await self._call("GET", url, "retrieve a uniquely associated object", attempt_number=attempt_number)
            data = response.data()
            if data == [] or data == {}:
                return None
            data = self._expect_object(response, url, "retrieve a uniquely associated object", attempt_number)
            return associated_class.from_json_object(data, url=url)
        except (RequestException, ResponseException, DataException) as e:
            if not missing_as_none:
                raise
            logger.debug(f"No uniquely associated object for {self!r} at {url}: {e.message}")
            return None

    ##############################
    # Lazy slots
    ##############################

    def _association_spec(self, name: str) -> Association:
        spec = self.associations.get(name)
        if spec is None:
            raise ModelException(f"{type(self).__name__} has no association named '{name}'.")
        return spec

    def association(self, name: str) -> Any:
        """Cached value of a slot: an entity or None, or a list for Many slots."""
        self._association_spec(name)
        return self._slots[name].value

    def is_loaded(self, name: str) -> bool:
        self._association_spec(name)
        return self._slots[name].loaded

    async def load(self, name: str, attempt_number: int = 0) -> Any:
        """Load one slot. Already loaded slots answer from cache."""
        spec = self._association_spec(name)
        state = self._slots[name]
        if state.loaded:
            return state.value
        if state.pending is None:
            state.pending = asyncio.ensure_future(
                self._fetch_association(name, spec, state, state.generation, attempt_number)
            )
        return await state.pending

    async def _fetch_association(
        self,
        name: str,
        spec: Association,
        state: SlotState,
        generation: int,
        attempt_number: int,
    ) -> Any:
        try:
            target = ModelRegistry.get_kind(spec.target)
            if spec.many:
                value = await self.get_associated_objects(
                    type(self), target, attempt_number, resource=spec.resource_name
                )
            else:
                value = await self.get_uniquely_associated_object(
                    type(self), target, attempt_number, resource=spec.resource_name
                )
            if state.generation == generation:
                state.value = value
                state.loaded = True
                logger.debug(f"Loaded {self!r}.{name}")
            return value
        finally:
            if state.generation == generation:
                state.pending = None

    async def load_associations(self, *names: str, attempt_number: int = 0) -> Dict[str, Any]:
        """
        Load several slots concurrently, every slot when no name is given.

        Returns once, after the last slot is loaded, the value of every
        requested slot by name. These are the values the loads resolved with,
        even when a slot was desynchronized meanwhile. The first failure is
        raised; loads still in flight keep running and fill their own slot.
        """
        names = names or tuple(self.associations)
        values = {name: self._slots[name].value for name in names if self.is_loaded(name)}
        missing = [name for name in names if name not in values]
        if missing:
            loaded = await asyncio.gather(*(self.load(name, attempt_number) for name in missing))
            values.update(zip(missing, loaded))
            logger.debug(f"Loaded {len(missing)} associations of {self!r}")
        return {name: values[name] for name in names}

    def desynchronize(self, *names: str) -> None:
        """Forget cached associations so that the next access reloads them."""
        for name in names or tuple(self.associations):
            self._slots[name].reset(self._association_spec(name))

    async def set_association(self, name: str, target: Optional["ModelEntity"], attempt_number: int = 0) -> None:
        """
        Join a single slot to `target`.

        The slot must be empty; unset it first to replace its value. On success
        the cache is filled locally and `target` forgets its own associations.
        """
        spec = self._association_spec(name)
        if spec.many:
            raise ModelException(f"'{name}' holds several objects, use add() instead.", attempt_number)
        if target is None or target.id is None:
            raise ModelException(f"The {name} must be an existing object to be associated.", attempt_number)
        if target.table_name != spec.target:
            raise ModelException(
                f"The {name} of a {type(self).__name__} must be a {spec.target}, not a {target.table_name}.",
                attempt_number,
            )
        state = self._slots[name]
        if state.value is not None:
            raise ModelException(f"The {name} is already set for this {type(self).__name__}.", attempt_number)

        await self.associate_object(type(self), spec.resource_name, target.id, attempt_number)
        target.desynchronize()
        state.value = target
        state.loaded = True

    async def unset_association(self, name: str, attempt_number: int = 0) -> None:
        spec = self._association_spec(name)
        if spec.many:
            raise ModelException(f"'{name}' holds several objects, use remove() instead.", attempt_number)
        state = self._slots[name]
        if state.value is None:
            raise ModelException(f"No {name} has been set for this {type(self).__name__}.", attempt_number)

        previous = state.value
        await self.delete_object_association(type(self), spec.resource_name, previous.id, attempt_number)
        previous.desynchronize()
        state.value = None

    async def link(self, name: str, target_id: Optional[int], attempt_number: int = 0) -> None:
        """Join a single slot by id without reading the target."""
        spec = self._association_spec(name)
        if spec.many:
            raise ModelException(f"'{name}' holds several objects, use add() instead.", attempt_number)
        await self.associate_object(type(self), spec.resource_name, target_id, attempt_number)
        self.desynchronize(name)

    async def unlink(self, name: str, target_id: Optional[int], attempt_number: int = 0) -> None:
        spec = self._association_spec(name)
        if spec.many:
            raise ModelException(f"'{name}' holds several objects, use remove() instead.", attempt_number)
        await self.delete_object_association(type(self), spec.resource_name, target_id, attempt_number)
        self.desynchronize(name)

    async def add(self, name: str, target_id: Optional[int], attempt_number: int = 0) -> None:
        """Join one more object to a Many slot."""
        spec = self._association_spec(name)
        if not spec.many:
            raise ModelException(f"'{name}' holds a single object, use link() instead.", attempt_number)
        await self.associate_object(type(self), spec.resource_name, target_id, attempt_number)
        self.desynchronize(name)

    async def remove(self, name: str, target_id: Optional[int], attempt_number: int = 0) -> None:
        spec = self._association_spec(name)
        if not spec.many:
            raise ModelException(f"'{name}' holds a single object, use unlink() instead.", attempt_number)
        await self.delete_object_association(type(self), spec.resource_name, target_id, attempt_number)
        self.desynchronize(name)

    ##############################
    # JSON projection
    ##############################

    def to_json_object(self) -> Dict[str, Any]:
        """Own fields only. Never looks at association slots."""
        return self.model_dump(mode="json", by_alias=True)

    async def to_complete_json_object(self, only_id: bool = False, attempt_number: int = 0) -> Dict[str, Any]:
        """
        Own fields plus one key per association.

        Related entities appear as their id (`only_id`) or as their shallow
        projection. Expansion never goes deeper than one level.
        """
        values = await self.load_associations(attempt_number=attempt_number)
        data = self.to_json_object()
        for name, spec in self.associations.items():
            value = values[name]
            key = spec.json_key(name)
            if spec.many:
                data[key] = self.serialize_array(value, only_id)
            elif value is None:
                data[key] = None
            else:
                data[key] = value.id if only_id else value.to_json_object()
        return data

    @staticmethod
    def serialize_array(entities: Iterable["ModelEntity"], only_id: bool = False) -> List[Any]:
        return [entity.id if only_id else entity.to_json_object() for entity in entities]

    @staticmethod
    async def complete_array_serialization(
        entities: List["ModelEntity"], only_id: bool = False, attempt_number: int = 0
    ) -> List[Dict[str, Any]]:
        """Complete projections of every entity, in the order given."""
        return list(await asyncio.gather(
            *(entity.to_complete_json_object(only_id, attempt_number) for entity in entities)
        ))

    @classmethod
    def from_json_object(cls: Type[T_Entity], data: Any, url: Optional[str] = None) -> T_Entity:
        if not isinstance(data, Mapping):
            raise DataException(f"Cannot build a {cls.__name__} from {type(data).__name__}", url, data=data)
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise DataException(f"Invalid {cls.__name__} data: {e}", url, data=data) from e

    @classmethod
    def parse_json(cls: Type[T_Entity], json_string: str) -> T_Entity:
        try:
            data = json.loads(json_string)
        except ValueError as e:
            raise DataException(f"Invalid JSON for a {cls.__name__}: {e}", data=json_string) from e
        return cls.from_json_object(data)

    ##############################
    # Completeness
    ##############################

    def has_required_fields(self) -> bool:
        return all(not _is_empty(getattr(self, field)) for field in self.required_fields)

    async def check_completeness(
        self,
        deep: bool = False,
        attempt_number: int = 0,
        _visited: Optional[Set[Tuple[str, Optional[int]]]] = None,
    ) -> bool:
        """
        Recompute `complete`.

        An entity is complete when it has an id, its mandatory fields are not
        empty and every mandatory association is loaded and complete. Only the
        mandatory slots are loaded, and nothing is loaded when the local checks
        already fail. With `deep`, related entities are re-evaluated too; an
        entity met twice keeps its current flag.
        """
        if self.id is None or not self.has_required_fields():
            self.complete = False
            return False

        required = [name for name, spec in self.associations.items() if spec.required]
        if not required:
            self.complete = True
            return True

        visited = set() if _visited is None else _visited
        visited.add(self.identity())
        values = await self.load_associations(*required, attempt_number=attempt_number)

        complete = True
        for name in required:
            value = values[name]
            targets = value if self.associations[name].many else [value] if value is not None else []
            if not targets:
                complete = False
                break
            for target in targets:
                if deep and target.identity() not in visited:
                    target_complete = await target.check_completeness(True, attempt_number, visited)
                else:
                    target_complete = target.complete
                if not target_complete:
                    complete = False
                    break
            if not complete:
                break

        self.complete = complete
        return complete

    ##############################
    # Attribute updates and cloning
    ##############################

    def set_field(self, name: str, value: Any) -> None:
        """Assign one of the kind's own fields, validated."""
        if name not in type(self).model_fields or name in ModelEntity.model_fields:
            raise ModelException(f"{type(self).__name__} has no settable attribute '{name}'.")
        try:
            setattr(self, name, value)
        except ValidationError as e:
            raise ModelException(f"Invalid value for {type(self).__name__}.{name}: {e}") from e

    @classmethod
    async def update_attribute(cls: Type[T_Entity], informations: Optional[Dict[str, Any]]) -> T_Entity:
        """
        Apply `{"id", "method", "value"}` to a stored object and save it.

        `set_<field>` assigns a field and always updates. `link_`, `unlink_`,
        `add_` and `remove_` followed by a slot name join or unjoin by id and
        update only when the completeness flag changed.
        """
        if not informations:
            raise ModelException("You must specify a proper piece of information to update attribute.")
        if informations.get("id") is None:
            raise ModelException("You must specify the object ID in order to update one of its attribute.")
        method = informations.get("method")
        if not isinstance(method, str) or _is_empty(method):
            raise ModelException("You must specify the object method in order to update one of its attribute.")
        prefix = next((p for p in ATTRIBUTE_METHODS if method.startswith(p)), None)
        if prefix is None:
            raise ModelException(
                f"You can only call set, link, unlink, add or remove methods in order to update an attribute, not {method}."
            )
        target_name = method[len(prefix):]
        value = informations.get("value")

        entity = await cls.read(informations["id"])
        was_complete = entity.complete

        if prefix == "set_":
            entity.set_field(target_name, value)
            await entity.check_completeness()
            await entity.update()
        else:
            if target_name not in cls.associations:
                raise ModelException(
                    f"The method you specify ({method}) has not been recognized for the model {cls.table_name}."
                )
            operation = getattr(entity, prefix[:-1])
            await operation(target_name, value)
            await entity.check_completeness()
            if entity.complete != was_complete:
                await entity.update()
        logger.info(f"Applied {method} on {entity!r}")
        return entity

    async def clone(self: T_Entity, attempt_number: int = 0) -> T_Entity:
        """Store a copy of this complete entity's own fields as a new object."""
        if not self.complete:
            raise ModelException(
                f"The model must be complete in order to be cloned. ModelClass: {self.table_name}", attempt_number
            )
        data = self.to_json_object()
        data.update({"id": None, "complete": False, "createdAt": None, "updatedAt": None})
        copy = type(self).from_json_object(data)
        await copy.create(attempt_number)
        await copy.check_completeness(attempt_number=attempt_number)
        if copy.complete:
            await copy.update(attempt_number)
        logger.debug(f"Cloned {self!r} into {copy!r}")
        return copy

    ##############################
    # Collection helpers
    ##############################

    @staticmethod
    def is_object_inside_array(entities: List["ModelEntity"], entity: "ModelEntity") -> bool:
        return any(item.id == entity.id for item in entities)

    @staticmethod
    def remove_object_from_array(entities: List["ModelEntity"], entity: "ModelEntity") -> bool:
        for index, item in enumerate(entities):
            if item.id == entity.id:
                del entities[index]
                return True
        return False
