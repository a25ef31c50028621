"""
Async view of the model service.

The workflow orchestrators only ever ``await`` these coroutines. Each one runs
the blocking ``ModelServiceClient`` call on a worker thread so the event loop
is never held up by HTTP.
"""

import asyncio
from typing import List, Optional

from xaiflow.client import ModelServiceClient
from xaiflow.config import ClientConfig
from xaiflow.schemas import (
    DatasetSchema,
    DatasetSummary,
    ExplanationResult,
    PredictionInput,
    PredictionResult,
    TrainedModel,
    TrainingSpec,
)


class AsyncModelService:
    """Coroutine wrapper around ModelServiceClient (one worker thread per call)."""

    def __init__(self, client: Optional[ModelServiceClient] = None, config: Optional[ClientConfig] = None):
        self.client = client or ModelServiceClient(config)

    def set_token(self, token: Optional[str]) -> None:
        """Send ``token`` with every later request."""
        self.client.config = self.client.config.with_token(token)

    async def login(self, username: str, password: str) -> str:
        return await asyncio.to_thread(self.client.login, username, password)

    async def list_datasets(self) -> List[DatasetSummary]:
        return await asyncio.to_thread(self.client.list_datasets)

    async def get_dataset(self, dataset_id: int) -> DatasetSchema:
        return await asyncio.to_thread(self.client.get_dataset, dataset_id)

    async def upload_dataset(self, file_path: str) -> DatasetSchema:
        return await asyncio.to_thread(self.client.upload_dataset, file_path)

    async def delete_dataset(self, dataset_id: int) -> None:
        await asyncio.to_thread(self.client.delete_dataset, dataset_id)

    async def train_model(self, spec: TrainingSpec) -> TrainedModel:
        return await asyncio.to_thread(self.client.train_model, spec)

    async def list_models(self) -> List[TrainedModel]:
        return await asyncio.to_thread(self.client.list_models)

    async def get_model(self, model_id: int) -> TrainedModel:
        return await asyncio.to_thread(self.client.get_model, model_id)

    async def delete_model(self, model_id: int) -> None:
        await asyncio.to_thread(self.client.delete_model, model_id)

    async def predict(self, model_id: int, input_data: PredictionInput) -> PredictionResult:
        # Copy so the worker thread never sees later edits to the form
        return await asyncio.to_thread(self.client.predict, model_id, dict(input_data))

    async def explain(self, model_id: int, input_data: PredictionInput) -> ExplanationResult:
        return await asyncio.to_thread(self.client.explain, model_id, dict(input_data))
