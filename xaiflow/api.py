"""
Programmatic API for xaiflow. Drive the whole train/predict/explain workflow
from your own asyncio code.

Example:
    from xaiflow import ClientConfig, Workbench

    wb = Workbench(ClientConfig(base_url="http://localhost:8080/api", token="..."))
    await wb.refresh()
    await wb.features.set_dataset(1)
    wb.features.set_target("label")
    wb.features.select_all()
    wb.training.set_model_name("churn")
    await wb.training.submit()
"""

from typing import List, Optional

from loguru import logger

from xaiflow.client import ModelServiceClient
from xaiflow.config import ClientConfig
from xaiflow.schemas import DatasetSummary, TrainedModel
from xaiflow.service import AsyncModelService
from xaiflow.workflow import FeatureSelection, PredictionOrchestrator, TrainingGate


class Workbench:
    """
    One user's workflow session: dataset and model lists plus the three
    workflow components wired together.

    The lists are refreshed here and handed to the components read-only;
    the training gate refreshes the model list after each successful run.
    """

    def __init__(self, config: Optional[ClientConfig] = None, service=None):
        """
        Args:
            config: Connection settings. If None, read from the environment.
            service: Any object with the AsyncModelService coroutines (tests pass fakes).
        """
        if service is None:
            config = config or ClientConfig.from_env()
            service = AsyncModelService(ModelServiceClient(config))
        self.config = config
        self.service = service
        self.datasets: List[DatasetSummary] = []
        self.models: List[TrainedModel] = []
        self.features = FeatureSelection(service)
        self.training = TrainingGate(service, self.features, on_model_trained=self.refresh_models)
        self.predictor = PredictionOrchestrator(service)

    async def refresh(self) -> None:
        """Reload both the dataset and the model list."""
        await self.refresh_datasets()
        await self.refresh_models()

    async def refresh_datasets(self) -> List[DatasetSummary]:
        self.datasets = list(await self.service.list_datasets())
        logger.debug("{} datasets available", len(self.datasets))
        return self.datasets

    async def refresh_models(self) -> List[TrainedModel]:
        self.models = list(await self.service.list_models())
        logger.debug("{} trained models available", len(self.models))
        return self.models

    async def upload(self, file_path: str):
        """Upload a CSV and refresh the dataset list."""
        dataset = await self.service.upload_dataset(file_path)
        await self.refresh_datasets()
        return dataset

    async def login(self, username: str, password: str) -> str:
        """Sign in and send the returned token with every later request."""
        token = await self.service.login(username, password)
        self.service.set_token(token)
        if self.config is not None:
            self.config = self.config.with_token(token)
        logger.info("Logged in as {}", username)
        return token

    async def delete_dataset(self, dataset_id: int) -> None:
        """Delete a dataset; deselect it if it is the current one."""
        await self.service.delete_dataset(dataset_id)
        if self.features.dataset_id == dataset_id:
            await self.features.set_dataset(None)
        await self.refresh_datasets()

    async def delete_model(self, model_id: int) -> None:
        """Delete a trained model; deselect it if it is the current one."""
        await self.service.delete_model(model_id)
        if self.predictor.model_id == model_id:
            await self.predictor.set_model(None)
        await self.refresh_models()
