# userdesk/users_api/client.py
#
#
# Imports
from typing import Optional, Dict, Any, Type
#
# 3rd-party Libraries
import httpx
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from .auth import TokenProvider, bearer_headers
from .exceptions import FailureReason, UsersAPIError, FetchError, MutationError
from .schemas import UsersPage, UserPatch
#
########################################################################################################################
#
# Functions:

HTTP_NO_CONTENT = 204


def _error_detail(response: httpx.Response, fallback: str) -> tuple:
    """Pulls a human readable message out of an error body, if it has one."""
    response_data = None
    error_detail = fallback
    try:
        response_data = response.json()
        if isinstance(response_data, dict):
            for key in ("error", "detail", "message"):
                if isinstance(response_data.get(key), str) and response_data[key]:
                    error_detail = response_data[key]
                    break
    except ValueError:  # JSONDecodeError included
        response_data = {"raw_text": response.text}
    return error_detail, response_data


class UsersAPIClient:
    def __init__(self, base_url: str, token_provider: Optional[TokenProvider] = None, timeout: float = 30.0,
                 api_key: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.token_provider = token_provider
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "UsersAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["x-api-key"] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        error_cls: Type[UsersAPIError],
        failure_message: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        authorized: bool = False,
    ) -> httpx.Response:
        client = await self._get_client()
        url = f"{self.base_url}{endpoint}"
        headers = bearer_headers(self.token_provider) if authorized else {}

        try:
            response = await client.request(method, endpoint, params=params, json=json_body, headers=headers)
        except httpx.RequestError as e:  # ConnectError, TimeoutException, ...
            logger.warning(f"{method} {url} failed before a response arrived: {e!r}")
            raise error_cls(FailureReason.NETWORK_FAILURE, f"{failure_message}: connection error to {url}: {e}") from e

        if not response.is_success and response.status_code != HTTP_NO_CONTENT:
            error_detail, response_data = _error_detail(response, failure_message)
            logger.warning(f"{method} {url} returned HTTP {response.status_code}: {error_detail}")
            raise error_cls(FailureReason.NON_SUCCESS_STATUS, error_detail,
                            status_code=response.status_code, response_data=response_data)
        logger.debug(f"{method} {url} -> HTTP {response.status_code}")
        return response

    async def fetch_page(self, page: int) -> UsersPage:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValueError(f"page must be a positive integer, got {page!r}")
        response = await self._request("GET", "/users", FetchError, "Failed to fetch users", params={"page": page})
        try:
            return UsersPage.model_validate(response.json())
        except ValueError as e:  # JSONDecodeError, UnicodeDecodeError
            raise FetchError(FailureReason.MALFORMED_RESPONSE, "Failed to decode JSON response",
                             status_code=response.status_code, response_data={"raw_text": response.text}) from e
        except ValidationError as e:
            raise FetchError(FailureReason.MALFORMED_RESPONSE, f"Unexpected users page payload: {e.error_count()} error(s)",
                             status_code=response.status_code) from e

    async def update_user(self, user_id: int, patch: UserPatch) -> None:
        await self._request("PUT", f"/users/{user_id}", MutationError, "Failed to update user",
                            json_body=patch.to_payload(), authorized=True)

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"/users/{user_id}", MutationError, "Failed to delete user", authorized=True)

#
# End of client.py
########################################################################################################################
