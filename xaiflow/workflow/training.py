"""
Training request builder and gate.

Validates the training form, builds the ``TrainingSpec`` and runs at most one
training request at a time: idle -> training -> idle (success or error).
"""

import inspect
from typing import Any, Callable, Optional, Union

from loguru import logger

from xaiflow.exceptions import WorkflowValidationError
from xaiflow.schemas import ModelType, TrainedModel, TrainingSpec
from xaiflow.workflow.features import FeatureSelection
from xaiflow.workflow.state import (
    FILL_ALL_FIELDS,
    TRAINING_FAILED,
    TRAINING_SUCCEEDED,
    Notices,
    Status,
    error_message,
)


class TrainingGate:
    """
    Training form state on top of a FeatureSelection.

    ``on_model_trained`` is called (sync or async, no arguments) after each
    successful training so the owner can refresh its model list.
    """

    def __init__(
        self,
        service,
        features: FeatureSelection,
        on_model_trained: Optional[Callable[[], Any]] = None,
    ):
        self._service = service
        self.features = features
        self.on_model_trained = on_model_trained
        self.model_name = ""
        self.model_type = ModelType.CLASSIFICATION
        self.training = False
        self.notices = Notices()

    @property
    def status(self) -> Status:
        return Status.TRAINING if self.training else Status.IDLE

    def set_model_name(self, name: str) -> None:
        self.model_name = name

    def set_model_type(self, model_type: Union[ModelType, str]) -> None:
        if isinstance(model_type, str):
            try:
                model_type = ModelType(model_type.strip().upper())
            except ValueError:
                raise WorkflowValidationError(f"Unknown model type: {model_type}") from None
        self.model_type = model_type

    def missing_fields(self) -> list:
        """Names of the form fields that still block training."""
        missing = []
        if self.features.dataset_id is None:
            missing.append("dataset")
        if not self.model_name.strip():
            missing.append("model name")
        if not self.features.target_variable:
            missing.append("target variable")
        if not self.features.selected_features():
            missing.append("features")
        return missing

    def can_submit(self) -> bool:
        return not self.training and not self.missing_fields()

    def build_spec(self) -> TrainingSpec:
        """A fresh TrainingSpec from the current form. Raises if the form is incomplete."""
        missing = self.missing_fields()
        if missing:
            raise WorkflowValidationError(f"{FILL_ALL_FIELDS} (missing: {', '.join(missing)})")
        return TrainingSpec(
            dataset_id=self.features.dataset_id,
            model_name=self.model_name.strip(),
            model_type=self.model_type,
            target_variable=self.features.target_variable,
            feature_names=self.features.selected_features(),
        )

    async def submit(self) -> Optional[TrainedModel]:
        """
        Train a model from the current form.

        A no-op while a request is already in flight. Remote failures end up in
        ``notices.error``; they are never raised.
        """
        if self.training:
            logger.debug("Training already in flight, ignoring submit")
            return None
        if not self.can_submit():
            self.notices.fail(FILL_ALL_FIELDS)
            return None

        spec = self.build_spec()
        self.training = True
        self.notices.clear()
        logger.info("Training '{}' ({}) on dataset {}", spec.model_name, spec.model_type.value, spec.dataset_id)
        try:
            model = await self._service.train_model(spec)
        except Exception as e:
            logger.warning("Training '{}' failed: {}", spec.model_name, e)
            self.notices.fail(error_message(e, TRAINING_FAILED))
            return None
        finally:
            self.training = False

        self.notices.succeed(TRAINING_SUCCEEDED)
        self.model_name = ""
        self.features.set_target(None)
        self.features.clear_features()
        logger.info("Model {} trained", model.id)
        await self._notify_trained()
        return model

    async def _notify_trained(self) -> None:
        if self.on_model_trained is None:
            return
        try:
            result = self.on_model_trained()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("on_model_trained callback failed")
