"""
HTTP client for the XAI model service.

Same endpoints as the web dashboard: auth, datasets, models, predict, explain.
Every call is blocking; ``xaiflow.service.AsyncModelService`` runs them off
the event loop.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from xaiflow.config import ClientConfig
from xaiflow.exceptions import AuthenticationError, ModelServiceError
from xaiflow.schemas import (
    DatasetSchema,
    DatasetSummary,
    ExplanationResult,
    PredictionInput,
    PredictionResult,
    TrainedModel,
    TrainingSpec,
)


def _unwrap(body: Any) -> Any:
    """
    The payload of an ``{success, message, data}`` envelope, or ``body`` itself.

    The service wraps some answers (POST /models/train) in this envelope.
    """
    if isinstance(body, dict) and "data" in body and ("success" in body or "message" in body):
        if body.get("message"):
            logger.info("Service says: {}", body["message"])
        return body["data"]
    return body


def _error_detail(response: requests.Response) -> Optional[str]:
    """The "message" field of an error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class ModelServiceClient:
    """Client for the dataset, model, prediction and explanation endpoints."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def _request(self, method: str, path: str, action: str, **kwargs) -> requests.Response:
        """
        Send one request and raise ModelServiceError on transport errors or HTTP >= 400.

        ``action`` names the call in error messages ("Train", "Predict" ...).
        """
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}) or {})
        logger.debug("{} {}", method, path)
        try:
            r = requests.request(
                method,
                self._url(path),
                headers=headers,
                timeout=self.config.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning("{} {} failed: {}", method, path, e)
            raise ModelServiceError(f"{action} failed: {e}") from e
        if r.status_code >= 400:
            detail = _error_detail(r)
            message = f"{action} failed: {detail or r.text or r.status_code}"
            error_cls = AuthenticationError if r.status_code == 401 else ModelServiceError
            logger.warning("{} {} -> HTTP {}: {}", method, path, r.status_code, detail or r.text)
            raise error_cls(message, status_code=r.status_code, body=r.text, service_message=detail)
        return r

    def _json(self, r: requests.Response, action: str) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise ModelServiceError(f"{action} failed: response is not JSON", status_code=r.status_code, body=r.text) from e

    def _parse(self, model_cls, data: Any, action: str):
        try:
            return model_cls.model_validate(data)
        except ValueError as e:
            raise ModelServiceError(f"{action} failed: unexpected response ({e})", body=data) from e

    # Auth

    def login(self, username: str, password: str) -> str:
        """POST /auth/login: returns the bearer token. Storing it is up to the caller."""
        r = self._request("POST", "/auth/login", "Login", json={"username": username, "password": password})
        body = self._json(r, "Login")
        token = (body.get("accessToken") or body.get("token")) if isinstance(body, dict) else None
        if not token:
            raise ModelServiceError("Login failed: no token in response", status_code=r.status_code, body=body)
        return token

    # Datasets

    def list_datasets(self) -> List[DatasetSummary]:
        """GET /datasets: id, file name and row count of each uploaded dataset."""
        r = self._request("GET", "/datasets", "List datasets")
        return [self._parse(DatasetSummary, d, "List datasets") for d in self._json(r, "List datasets")]

    def get_dataset(self, dataset_id: int) -> DatasetSchema:
        """GET /datasets/{id}: dataset schema including headers."""
        r = self._request("GET", f"/datasets/{dataset_id}", "Get dataset")
        return self._parse(DatasetSchema, self._json(r, "Get dataset"), "Get dataset")

    def upload_dataset(self, file_path: str) -> DatasetSchema:
        """POST /datasets/upload: upload a local CSV file."""
        path = Path(file_path).resolve()
        if not path.exists():
            raise ModelServiceError(f"File not found: {path}")
        with open(path, "rb") as f:
            files = {"file": (path.name, f, "text/csv")}
            r = self._request("POST", "/datasets/upload", "Upload", files=files)
        return self._parse(DatasetSchema, self._json(r, "Upload"), "Upload")

    def delete_dataset(self, dataset_id: int) -> None:
        """DELETE /datasets/{id}."""
        self._request("DELETE", f"/datasets/{dataset_id}", "Delete dataset")

    # Models

    def train_model(self, spec: TrainingSpec) -> TrainedModel:
        """POST /models/train: blocks until the service has trained the model."""
        r = self._request("POST", "/models/train", "Train", json=spec.to_payload())
        return self._parse(TrainedModel, _unwrap(self._json(r, "Train")), "Train")

    def list_models(self) -> List[TrainedModel]:
        """GET /models."""
        r = self._request("GET", "/models", "List models")
        return [self._parse(TrainedModel, m, "List models") for m in self._json(r, "List models")]

    def get_model(self, model_id: int) -> TrainedModel:
        """GET /models/{id}: model metadata including its feature names."""
        r = self._request("GET", f"/models/{model_id}", "Get model")
        return self._parse(TrainedModel, self._json(r, "Get model"), "Get model")

    def delete_model(self, model_id: int) -> None:
        """DELETE /models/{id}."""
        self._request("DELETE", f"/models/{model_id}", "Delete model")

    def predict(self, model_id: int, input_data: PredictionInput) -> PredictionResult:
        """POST /models/{id}/predict."""
        r = self._request("POST", f"/models/{model_id}/predict", "Predict", json=dict(input_data))
        return self._parse(PredictionResult, self._json(r, "Predict"), "Predict")

    def explain(self, model_id: int, input_data: PredictionInput) -> ExplanationResult:
        """POST /models/{id}/explain."""
        r = self._request("POST", f"/models/{model_id}/explain", "Explain", json=dict(input_data))
        return self._parse(ExplanationResult, self._json(r, "Explain"), "Explain")
