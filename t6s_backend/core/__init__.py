from t6s_backend.core.config import ConnectionSettings, DatabaseConnection
from t6s_backend.core.exceptions import (
    T6SException, ModelException, RequestException, ResponseException, DataException
)
from t6s_backend.core.rest_client import RestClient, RestClientError, RestClientResponse, HttpxRestClient

__all__ = [
    "ConnectionSettings", "DatabaseConnection",
    "T6SException", "ModelException", "RequestException", "ResponseException", "DataException",
    "RestClient", "RestClientError", "RestClientResponse", "HttpxRestClient",
]
