"""Pytest configuration and fixtures."""
import asyncio
from typing import Any, Dict, List

import pytest
from loguru import logger

from xaiflow.exceptions import ModelServiceError
from xaiflow.schemas import (
    DatasetSchema,
    DatasetSummary,
    ExplanationResult,
    PredictionResult,
    TrainedModel,
)


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


class FakeModelService:
    """
    In-memory stand-in for AsyncModelService.

    ``calls`` records every call as (name, args). A name in ``failures`` makes
    that call raise. ``gate(name)`` queues an asyncio.Event: the next call of
    that name waits for it (one event per call, in order).
    """

    def __init__(self):
        self.datasets: Dict[int, DatasetSchema] = {}
        self.models: Dict[int, TrainedModel] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, List[asyncio.Event]] = {}
        self.next_model_id = 100
        self.token = None

    def add_dataset(self, id: int, headers: List[str], file_name: str = "data.csv", row_count: int = 10) -> DatasetSchema:
        schema = DatasetSchema(id=id, file_name=file_name, row_count=row_count, headers=headers)
        self.datasets[id] = schema
        return schema

    def add_model(self, id: int, feature_names: List[str], model_type: str = "CLASSIFICATION", **extra) -> TrainedModel:
        model = TrainedModel(id=id, model_name=f"model-{id}", model_type=model_type, feature_names=feature_names, **extra)
        self.models[id] = model
        return model

    def gate(self, name: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates.setdefault(name, []).append(event)
        return event

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)

    async def _enter(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        pending = self.gates.get(name)
        gate = pending.pop(0) if pending else None
        if gate is not None:
            await gate.wait()
        error = self.failures.get(name)
        if error is not None:
            raise error

    def set_token(self, token) -> None:
        self.token = token

    async def login(self, username: str, password: str) -> str:
        await self._enter("login", username, password)
        return f"token-{username}"

    async def delete_dataset(self, dataset_id: int) -> None:
        await self._enter("delete_dataset", dataset_id)
        self.datasets.pop(dataset_id, None)

    async def delete_model(self, model_id: int) -> None:
        await self._enter("delete_model", model_id)
        self.models.pop(model_id, None)

    async def list_datasets(self) -> List[DatasetSummary]:
        await self._enter("list_datasets")
        return [DatasetSummary(id=d.id, file_name=d.file_name, row_count=d.row_count) for d in self.datasets.values()]

    async def get_dataset(self, dataset_id: int) -> DatasetSchema:
        await self._enter("get_dataset", dataset_id)
        if dataset_id not in self.datasets:
            raise ModelServiceError("Get dataset failed: not found", status_code=404, service_message="Dataset not found")
        return self.datasets[dataset_id]

    async def upload_dataset(self, file_path: str) -> DatasetSchema:
        await self._enter("upload_dataset", file_path)
        return self.add_dataset(len(self.datasets) + 1, ["a", "b"], file_name=file_path)

    async def train_model(self, spec) -> TrainedModel:
        await self._enter("train_model", spec)
        self.next_model_id += 1
        return self.add_model(self.next_model_id, list(spec.feature_names), model_type=spec.model_type.value)

    async def list_models(self) -> List[TrainedModel]:
        await self._enter("list_models")
        return list(self.models.values())

    async def get_model(self, model_id: int) -> TrainedModel:
        await self._enter("get_model", model_id)
        if model_id not in self.models:
            raise ModelServiceError("Get model failed: not found", status_code=404)
        return self.models[model_id]

    async def predict(self, model_id: int, input_data: Dict[str, str]) -> PredictionResult:
        await self._enter("predict", model_id, dict(input_data))
        return PredictionResult(prediction=f"yes-{model_id}", confidence=0.8, probabilities={"yes": 0.8, "no": 0.2}, input_data=input_data)

    async def explain(self, model_id: int, input_data: Dict[str, str]) -> ExplanationResult:
        await self._enter("explain", model_id, dict(input_data))
        contributions = [
            {"featureName": name, "contribution": 0.1 * (i + 1), "direction": "positive"}
            for i, name in enumerate(input_data)
        ]
        return ExplanationResult.model_validate({
            "prediction": f"yes-{model_id}",
            "featureContributions": contributions,
            "inputData": input_data,
            "explanationText": "because",
        })


@pytest.fixture
def service() -> FakeModelService:
    return FakeModelService()

