"""Model workflow: feature selection, training gate, prediction/explanation orchestration."""

from xaiflow.workflow.features import FeatureSelection
from xaiflow.workflow.fork_join import JoinedOutcome, fork_join
from xaiflow.workflow.prediction import PredictionOrchestrator, SubmissionToken
from xaiflow.workflow.state import Notices, Status
from xaiflow.workflow.training import TrainingGate

__all__ = [
    "FeatureSelection",
    "JoinedOutcome",
    "Notices",
    "PredictionOrchestrator",
    "Status",
    "SubmissionToken",
    "TrainingGate",
    "fork_join",
]
