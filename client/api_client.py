"""HTTP client for the waitlist signup endpoint."""

from typing import Optional, Union

import httpx
from pydantic import ValidationError as SchemaError

from errors import TransientNetworkError
from schemas.signup import SignupFailureResponse, SignupRequest, SignupSuccessResponse

SignupResponse = Union[SignupSuccessResponse, SignupFailureResponse]

NETWORK_ERROR_MESSAGE = "We couldn't reach the server. Please try again."
UNEXPECTED_RESPONSE_MESSAGE = "Something went wrong. Please try again."


class WaitlistApiClient:
    """
    Posts signups to ``{api_prefix}/waitlists/{waitlist}/signups``.

    The underlying ``httpx.AsyncClient`` owns the base URL and timeout;
    any transport failure or unreadable answer raises TransientNetworkError.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        waitlist: str = "main",
        api_prefix: str = "/api/v1",
    ):
        self._http = http
        self.waitlist = waitlist
        self.path = f"{api_prefix}/waitlists/{waitlist}/signups"

    async def submit_signup(self, email: str, reference_url: Optional[str]) -> SignupResponse:
        body = SignupRequest.model_construct(email=email, reference_url=reference_url)
        try:
            resp = await self._http.post(self.path, json=body.model_dump(by_alias=True))
        except httpx.HTTPError as exc:
            raise TransientNetworkError(NETWORK_ERROR_MESSAGE) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise TransientNetworkError(UNEXPECTED_RESPONSE_MESSAGE) from exc

        if not isinstance(data, dict) or "ok" not in data:
            raise TransientNetworkError(UNEXPECTED_RESPONSE_MESSAGE)

        try:
            if data["ok"] is True and resp.is_success:
                return SignupSuccessResponse.model_validate(data)
            if data["ok"] is False:
                return SignupFailureResponse.model_validate(data)
        except SchemaError as exc:
            raise TransientNetworkError(UNEXPECTED_RESPONSE_MESSAGE) from exc

        raise TransientNetworkError(UNEXPECTED_RESPONSE_MESSAGE)
