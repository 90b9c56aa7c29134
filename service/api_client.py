import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import ValidationError

from config import API_URL, REQUEST_TIMEOUT
from errors import ServiceError
from payload.request_builder import ServiceRequest
from state.results import (
    ClassificationResult,
    FeatureSet,
    PredictionResult,
    RegressionResult,
    TrainAllResult,
    UploadResult,
    train_result_adapter,
)

logger = logging.getLogger(__name__)


def _error_field(response: Optional[requests.Response]) -> Optional[str]:
    """Returns the structured `error` field of a response body, if the body has one."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class MLServiceClient:
    """
    Talks to the model training service. One attempt per call, no retries.

    Every operation either returns the endpoint's typed result or raises
    `ServiceError` with the message that should be shown to the user.
    """

    def __init__(self, base_url: str = API_URL, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # --- Transport ---

    def _send(self, request: ServiceRequest) -> Dict[str, Any]:
        url = f"{self.base_url}{request.path}"
        logger.info(f"Sending {request.describe()} to {self.base_url}")
        try:
            response = self.session.request(
                request.method,
                url,
                files=request.files or None,
                data=request.data or None,
                params=request.params or None,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            response = getattr(e, "response", None)
            message = _error_field(response) or str(e)
            status = response.status_code if response is not None else None
            logger.error(f"{request.describe()} failed: {message}")
            raise ServiceError(message, status_code=status) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ServiceError(f"Unexpected response from service: {e}", response.status_code) from e

        if not isinstance(body, dict):
            raise ServiceError(f"Unexpected response from service: {body!r}", response.status_code)
        if body.get("error"):
            logger.error(f"{request.describe()} reported an error: {body['error']}")
            raise ServiceError(str(body["error"]), response.status_code)
        return body

    async def _call(self, request: ServiceRequest) -> Dict[str, Any]:
        return await asyncio.to_thread(self._send, request)

    @staticmethod
    def _parse(parser, body: Dict[str, Any]):
        try:
            return parser(body)
        except ValidationError as e:
            logger.error(f"Response did not match the expected shape: {e}")
            raise ServiceError(f"Unexpected response from service: {e.errors()[0]['msg']}") from e

    # --- Endpoints ---

    async def upload(self, request: ServiceRequest) -> UploadResult:
        body = await self._call(request)
        return self._parse(UploadResult.model_validate, body)

    async def train(self, request: ServiceRequest) -> Union[ClassificationResult, RegressionResult]:
        body = await self._call(request)
        return self._parse(train_result_adapter.validate_python, body)

    async def train_all(self, request: ServiceRequest) -> TrainAllResult:
        body = await self._call(request)
        return self._parse(TrainAllResult.model_validate, body)

    async def get_input_features(self, request: ServiceRequest) -> List[str]:
        body = await self._call(request)
        return self._parse(FeatureSet.model_validate, body).features or []

    async def predict(self, request: ServiceRequest) -> PredictionResult:
        body = await self._call(request)
        return self._parse(PredictionResult.model_validate, body)
