"""
xaiflow: client and workflow orchestration for an explainable-ML model service.

CLI:
    pip install xaiflow
    XAIFLOW_API_URL=http://localhost:8080/api XAIFLOW_TOKEN=... xaiflow
    xaiflow › use 1
    xaiflow › target label

Library:
    from xaiflow import Workbench

    wb = Workbench()
    await wb.predictor.set_model(5)
    wb.predictor.set_input_value("age", "30")
    result = await wb.predictor.submit()
"""

__version__ = "0.1.0"

from xaiflow.api import Workbench
from xaiflow.client import ModelServiceClient
from xaiflow.config import ClientConfig
from xaiflow.exceptions import (
    AuthenticationError,
    FeatureSelectionError,
    ModelServiceError,
    WorkflowValidationError,
    XaiflowError,
)
from xaiflow.service import AsyncModelService

__all__ = [
    "AsyncModelService",
    "AuthenticationError",
    "ClientConfig",
    "FeatureSelectionError",
    "ModelServiceClient",
    "ModelServiceError",
    "Workbench",
    "WorkflowValidationError",
    "XaiflowError",
    "__version__",
]
