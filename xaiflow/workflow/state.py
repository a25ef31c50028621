"""
Shared state pieces for the workflow components: status values, user-facing
notices and the messages they carry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from xaiflow.exceptions import ModelServiceError


FILL_ALL_FIELDS = "Please fill in all required fields"
DATASET_LOAD_FAILED = "Failed to load dataset details"
MODEL_LOAD_FAILED = "Failed to load model details"
TRAINING_FAILED = "Training failed"
TRAINING_SUCCEEDED = "Model trained successfully!"
PREDICTION_FAILED = "Prediction failed"
PREDICTION_SUCCEEDED = "Prediction completed successfully!"


class Status(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    TRAINING = "training"
    PREDICTING = "predicting"


@dataclass
class Notices:
    """The error and success banners of one workflow component. Empty string = hidden."""

    error: str = ""
    success: str = ""

    def clear(self) -> None:
        self.error = ""
        self.success = ""

    def fail(self, message: str) -> None:
        self.error = message
        self.success = ""

    def succeed(self, message: str) -> None:
        self.error = ""
        self.success = message


def error_message(error: Optional[BaseException], fallback: str) -> str:
    """The service's own message for a failed call, else ``fallback``."""
    if isinstance(error, ModelServiceError) and error.service_message:
        return error.service_message
    return fallback
