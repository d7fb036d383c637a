from abc import ABC, abstractmethod
from fnmatch import fnmatch
import json as jsonlib

import httpx
from typing import Any
from shared.errors import TransportError, UpstreamProtocolError, UpstreamStatusError, UpstreamTimeout
from shared.models.config import EnvConfig

from shared.helper.HelperConfig import HelperConfig


def decode_json_response(response: httpx.Response) -> Any:
    """Decode an upstream response body into its canonical shape.

    Some upstreams wrap a single logical result in a JSON array, others return
    the bare object. Both collapse to the same value here: an array yields its
    first element, anything else passes through unchanged.

    Args:
        response (httpx.Response): The completed upstream response.

    Returns:
        Any: The normalized JSON value.

    Raises:
        UpstreamProtocolError: If the body is not valid JSON or is an empty array.
    """
    try:
        parsed = jsonlib.loads(response.content)
    except (ValueError, UnicodeDecodeError) as e:
        raise UpstreamProtocolError("Invalid response from upstream", cause=e) from e
    if isinstance(parsed, list):
        if not parsed:
            raise UpstreamProtocolError("Upstream returned an empty result list")
        return parsed[0]
    return parsed


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        # client and config
        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()
        self._api_key_hosts: list[str] = self.get_config_val("API_KEY_HOSTS", default=[], val_type="list")

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the client are set and valid.

        Raises:
            ValueError: If any required configuration value is missing or invalid.
        """
        req_config = self._get_required_config()
        for config in req_config:
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def is_booted(self) -> bool:
        return self._client is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the type of the client in lowercase. E.g. "rag"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        pass

    def get_engine_name(self) -> str:
        """
        Returns the name of the engine used by the client. E.g. "qdrant"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the name of the engine used by the client. E.g. "qdrant"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns all required configurations for the client.

        Returns:
            list[EnvConfig]: A list containing the details of each required configuration key.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full configuration key name for the client. E.g. "RAG_QDRANT_API_KEY"
        """
        key_prefix = f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}"
        return f"{key_prefix}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Retrieves the value of a configuration key for the client.

        Args:
            raw_key (str): The raw configuration key name
            default (Any): The default value to return if the configuration key is not set
            val_type (str): The type of the configuration value ("string", "number", "bool", "list")
        """
        key = self._get_config_key_name(raw_key)
        if val_type == "string":
            return self._helper_config.get_string_val(key, default=default)
        elif val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        elif val_type == "list":
            return self._helper_config.get_list_val(key, default=default)
        else:
            raise ValueError(f"Unsupported config value type '{val_type}' for env key '{raw_key}' in {self.get_client_type().upper()} client '{self.get_engine_name()}'.")

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the authentication header for the client backend server, if an API key is set.

        Returns:
            dict: A dictionary containing the auth data
        """
        pass

    def _get_auth_header_for(self, url: str) -> dict:
        """
        Returns the auth header for a concrete target URL.

        Without API_KEY_HOSTS the key goes out with every request of this client.
        With it, only targets whose host matches one of the glob patterns get the key.

        Args:
            url (str): The full target URL of the request.

        Returns:
            dict: The auth header, or an empty dict.
        """
        if not self._api_key_hosts:
            return self._get_auth_header()
        host = httpx.URL(url).host
        if any(fnmatch(host, pattern) for pattern in self._api_key_hosts):
            return self._get_auth_header()
        return {}

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the base URL of the client backend server from env variables

        Returns:
            str: The base URL of the client backend server (e.g. "http://localhost:6333")
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the endpoint path for healthcheck requests.

        Returns:
            str: The endpoint path for healthcheck requests (e.g. "/healthz")
        """
        pass

    def _build_url(self, endpoint: str) -> str:
        """Join an endpoint onto the base URL. Absolute endpoints (webhook URLs) are used as-is."""
        endpoint = endpoint.strip()
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        endpoint = "/" + endpoint.lstrip("/") if endpoint else ""
        return f"{self._get_base_url().rstrip('/')}{endpoint}"

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """Check if the client backend is healthy by sending a test request.

        Returns:
            httpx.Response: The response from the healthcheck request.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck())

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialise the HTTP client.

        Args:
            transport (httpx.AsyncBaseTransport | None): Optional transport override, e.g. httpx.MockTransport.
        """
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client and any other resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        json: Any = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an HTTP request to the client backend.

        Args:
            method: HTTP method (GET, POST, …).
            json: JSON-serialisable body, omitted when None.
            endpoint: Path to append to the base URL, or an absolute URL.
            additional_headers: Extra headers that override the defaults.
            raise_on_error: Raise UpstreamStatusError on a non-2xx status.
            timeout: Per-call timeout in seconds, defaults to the client timeout.

        Returns:
            The raw httpx.Response.

        Raises:
            RuntimeError: If the client is not booted.
            UpstreamStatusError: On a non-2xx status when raise_on_error is True.
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialised. Call boot() before making requests.")

        url = self._build_url(endpoint)

        # httpx sets Content-Type for json bodies
        headers: dict = {}
        headers.update(self._get_auth_header_for(url))
        if additional_headers:
            headers.update(additional_headers)

        kwargs: dict = {
            "url": url,
            "headers": headers,
            "timeout": timeout if timeout is not None else self.timeout,
        }
        if json is not None:
            kwargs["json"] = json

        response = await self._client.request(method, **kwargs)

        if raise_on_error and not response.is_success:
            self.logging.error(
                "Request to %s failed with status %d: %s",
                url,
                response.status_code,
                response.text[:500],
            )
            raise UpstreamStatusError(response.status_code, url=url)

        return response

    async def do_json_request(self, endpoint: str, payload: Any, timeout: float | None = None, method: str = "POST") -> Any:
        """Send a JSON body and return the normalized JSON answer.

        Single attempt, no retries. Every failure mode is mapped onto the
        upstream error taxonomy.

        Args:
            endpoint (str): Path relative to the base URL, or an absolute URL.
            payload (Any): JSON-serialisable request body.
            timeout (float | None): Hard per-call timeout in seconds.
            method (str): HTTP method, POST by default.

        Returns:
            Any: The decoded body, see decode_json_response().

        Raises:
            UpstreamTimeout: If the call exceeds the timeout.
            TransportError: On connection level faults.
            UpstreamProtocolError: On a non-2xx status, an undecodable body or a non-JSON body.
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        url = self._build_url(endpoint)
        try:
            response = await self.do_request(
                method=method,
                json=payload,
                endpoint=endpoint,
                raise_on_error=True,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as e:
            self.logging.warning("Request to %s timed out after %ss", url, effective_timeout)
            raise UpstreamTimeout(effective_timeout, url=url, cause=e) from e
        except httpx.TransportError as e:
            self.logging.warning("Request to %s failed: %s", url, e)
            raise TransportError(f"Could not reach upstream: {e}", cause=e, context={"url": url}) from e
        except httpx.RequestError as e:
            # e.g. a body that cannot be decoded with its declared Content-Encoding
            self.logging.warning("Request to %s returned an unreadable response: %s", url, e)
            raise UpstreamProtocolError(f"Invalid response from upstream: {e}", cause=e, context={"url": url}) from e
        return decode_json_response(response)
