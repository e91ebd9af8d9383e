import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from t6s_backend.core.config import DatabaseConnection
from t6s_backend.core.exceptions import ModelException
from t6s_backend.core.rest_client import HttpxRestClient, RestClient

if TYPE_CHECKING:
    from t6s_backend.model.entity import ModelEntity

##############################
# Registry Facade
##############################

class ModelRegistry:
    """
    Static registry holding the transport client and the known entity kinds.

    Entity kinds register themselves under their resource name when their class
    is defined, so associations can name their target by resource name without
    importing it.
    """
    _logger = logging.getLogger("ModelRegistry")
    _client: Optional[RestClient] = None
    _kinds: Dict[str, Type["ModelEntity"]] = {}

    @classmethod
    def use_client(cls, client: RestClient) -> None:
        """Set the transport client to use."""
        cls._client = client
        cls._logger.info(f"Now using {type(client).__name__} as rest client")

    @classmethod
    def get_client(cls) -> RestClient:
        if cls._client is None:
            settings = DatabaseConnection.settings()
            cls._client = HttpxRestClient(timeout=settings.timeout)
            cls._logger.info(f"Created default HttpxRestClient for {settings.base_url}")
        return cls._client

    @classmethod
    def register_kind(cls, kind: Type["ModelEntity"]) -> None:
        name = kind.table_name
        known = cls._kinds.get(name)
        if known is not None and known is not kind:
            cls._logger.warning(f"Resource {name} was bound to {known.__name__}, now bound to {kind.__name__}")
        cls._kinds[name] = kind
        cls._logger.debug(f"Registered kind {kind.__name__} for resource {name}")

    @classmethod
    def get_kind(cls, name: str) -> Type["ModelEntity"]:
        kind = cls._kinds.get(name)
        if kind is None:
            raise ModelException(f"No model kind is registered for resource '{name}'. Known: {sorted(cls._kinds)}")
        return kind

    @classmethod
    def has_kind(cls, name: str) -> bool:
        return name in cls._kinds

    @classmethod
    def list_kinds(cls) -> List[Type["ModelEntity"]]:
        return list(cls._kinds.values())

    @classmethod
    def get_registry_status(cls) -> Dict[str, Any]:
        return {
            "client": type(cls._client).__name__ if cls._client is not None else None,
            "kinds": sorted(cls._kinds),
            "total_kinds": len(cls._kinds),
        }

    @classmethod
    def clear(cls) -> None:
        """Forget the transport client. Registered kinds are kept."""
        cls._client = None
