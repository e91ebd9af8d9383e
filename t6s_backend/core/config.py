"""
Connection settings of the resource server.

The settings are resolved once per process and then only read:

- `T6S_DATABASE_HOST` in the environment (a `.env` file is honoured) selects
  that host on port 80 with the "api" endpoint;
- otherwise the JSON file named by `T6S_CONNECTION_INFOS` (default
  `connection_infos.json`) provides `host`, `port` and `endpoint`.
"""
import json
import logging
import os
from typing import Any, Optional, Union
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from t6s_backend.core.exceptions import ModelException

logger = logging.getLogger("DatabaseConnection")

DEFAULT_CONNECTION_FILE = "connection_infos.json"


class ConnectionSettings(BaseModel):
    """Where the resource server lives."""
    host: str
    port: int = 80
    endpoint: str = "api"
    timeout: float = Field(default=10.0, description="Transport timeout in seconds")

    model_config = {"frozen": True}

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/{self.endpoint}"


class DatabaseConnection:
    """Process-wide access to the connection settings and URL templates."""
    _settings: Optional[ConnectionSettings] = None

    @classmethod
    def configure(cls, settings: ConnectionSettings) -> None:
        """Use explicit settings instead of the environment."""
        cls._settings = settings
        logger.info(f"Connection configured for {settings.base_url}")

    @classmethod
    def reset(cls) -> None:
        cls._settings = None

    @classmethod
    def settings(cls) -> ConnectionSettings:
        if cls._settings is None:
            cls._settings = cls._resolve()
        return cls._settings

    @classmethod
    def _resolve(cls) -> ConnectionSettings:
        load_dotenv()
        host = os.getenv("T6S_DATABASE_HOST")
        if host:
            logger.info(f"Using database host {host} from environment")
            return ConnectionSettings(host=host, port=80, endpoint="api")

        path = os.getenv("T6S_CONNECTION_INFOS", DEFAULT_CONNECTION_FILE)
        try:
            with open(path, "r", encoding="utf-8") as f:
                infos = json.load(f)
            settings = ConnectionSettings.model_validate(infos)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Connection configuration file {path} can't be read: {e}")
            raise ModelException(f"Connection configuration file {path} can't be read: {e}") from e
        logger.info(f"Using database connection from {path}: {settings.base_url}")
        return settings

    @classmethod
    def get_host(cls) -> str:
        return cls.settings().host

    @classmethod
    def get_port(cls) -> int:
        return cls.settings().port

    @classmethod
    def get_endpoint(cls) -> str:
        return cls.settings().endpoint

    @classmethod
    def get_base_url(cls) -> str:
        return cls.settings().base_url

    @classmethod
    def model_endpoint(cls, kind: str) -> str:
        return f"{cls.get_base_url()}/{kind}"

    @classmethod
    def object_endpoint(cls, kind: str, object_id: Union[int, str]) -> str:
        return f"{cls.get_base_url()}/{kind}/{object_id}"

    @classmethod
    def association_endpoint(cls, kind: str, object_id: Union[int, str], associated_kind: str) -> str:
        return f"{cls.get_base_url()}/{kind}/{object_id}/{associated_kind}"

    @classmethod
    def associated_object_endpoint(
        cls,
        kind: str,
        object_id: Union[int, str],
        associated_kind: str,
        associated_id: Union[int, str],
    ) -> str:
        return f"{cls.get_base_url()}/{kind}/{object_id}/{associated_kind}/{associated_id}"

    @classmethod
    def search_endpoint(cls, kind: str, param_name: str, param_value: Any) -> str:
        return f"{cls.get_base_url()}/{kind}?{quote(str(param_name))}={quote(str(param_value))}"
