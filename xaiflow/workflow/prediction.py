"""
Prediction + explanation orchestrator.

Holds the input form of the selected model and, on submit, asks the service
for a prediction and its explanation at the same time. Results are kept only
if both calls succeed and the submission is still the latest one.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from xaiflow.schemas import (
    ExplainedPrediction,
    ExplanationResult,
    InputField,
    PredictionInput,
    PredictionResult,
    TrainedModel,
)
from xaiflow.workflow.fork_join import fork_join
from xaiflow.workflow.state import (
    FILL_ALL_FIELDS,
    MODEL_LOAD_FAILED,
    PREDICTION_FAILED,
    PREDICTION_SUCCEEDED,
    Notices,
    Status,
    error_message,
)


@dataclass(frozen=True)
class SubmissionToken:
    """Identity of one predict/explain submission: model, input snapshot and sequence number."""

    seq: int
    model_id: int
    inputs: Tuple[Tuple[str, str], ...]

    def input_data(self) -> PredictionInput:
        return dict(self.inputs)


class PredictionOrchestrator:
    """Model selection, input form and predict/explain submission for one session."""

    def __init__(self, service):
        self._service = service
        self.model_id: Optional[int] = None
        self.model: Optional[TrainedModel] = None
        self._inputs: Dict[str, str] = {}
        self.prediction: Optional[PredictionResult] = None
        self.explanation: Optional[ExplanationResult] = None
        self._result_token: Optional[SubmissionToken] = None
        self._latest: Optional[SubmissionToken] = None
        self._submit_seq = 0
        self._fetch_seq = 0
        self.loading = False
        self.predicting = False
        self.notices = Notices()

    @property
    def status(self) -> Status:
        if self.loading:
            return Status.LOADING
        if self.predicting:
            return Status.PREDICTING
        return Status.IDLE

    @property
    def inputs(self) -> PredictionInput:
        return dict(self._inputs)

    async def set_model(self, model_id: Optional[int]) -> Optional[TrainedModel]:
        """
        Select a model and fetch its details.

        Drops every result, notice and in-flight submission of the previous
        model. On success each declared feature gets an empty input value.
        """
        self._fetch_seq += 1
        seq = self._fetch_seq
        self._latest = None
        self.predicting = False
        self._clear_results()
        self.notices.clear()
        self.model_id = model_id
        self.model = None
        self._inputs = {}
        if model_id is None:
            self.loading = False
            return None

        self.loading = True
        try:
            model = await self._service.get_model(model_id)
        except Exception as e:
            if seq != self._fetch_seq:
                return None
            self.loading = False
            logger.warning("Loading model {} failed: {}", model_id, e)
            self.notices.fail(MODEL_LOAD_FAILED)
            return None

        if seq != self._fetch_seq:
            logger.debug("Dropping details of model {}: selection changed", model_id)
            return None
        self.loading = False
        self.model = model
        self._inputs = {feature: "" for feature in model.feature_names}
        return model

    def set_input_value(self, feature: str, value: str) -> None:
        if feature not in self._inputs:
            raise KeyError(f"'{feature}' is not a feature of the selected model")
        self._inputs[feature] = "" if value is None else str(value)

    def input_fields(self) -> List[InputField]:
        """One numeric, required field per model feature, in model order."""
        if self.model is None:
            return []
        return [InputField(name=f, value=self._inputs.get(f, "")) for f in self.model.feature_names]

    def missing_inputs(self) -> List[str]:
        return [f.name for f in self.input_fields() if not f.filled]

    def can_submit(self) -> bool:
        return self.model is not None and not self.missing_inputs()

    async def submit(self) -> Optional[ExplainedPrediction]:
        """
        Predict and explain the current input concurrently.

        Returns the combined view when both calls succeed for what is still the
        latest submission. Remote failures end up in ``notices.error``.
        """
        if not self.can_submit():
            self.notices.fail(FILL_ALL_FIELDS)
            return None

        self._submit_seq += 1
        token = SubmissionToken(
            seq=self._submit_seq,
            model_id=self.model.id,
            inputs=tuple((f, self._inputs[f]) for f in self.model.feature_names),
        )
        self._latest = token
        self.predicting = True
        self._clear_results()
        self.notices.clear()
        logger.debug("Submission {} for model {}", token.seq, token.model_id)

        input_data = token.input_data()
        outcome = await fork_join(
            self._service.predict(token.model_id, input_data),
            self._service.explain(token.model_id, input_data),
        )

        if token != self._latest:
            logger.debug("Dropping results of superseded submission {}", token.seq)
            return None
        self.predicting = False
        if not outcome.ok:
            error = outcome.first_error()
            logger.warning("Prediction for model {} failed: {}", token.model_id, error)
            self.notices.fail(error_message(error, PREDICTION_FAILED))
            return None

        self.prediction, self.explanation = outcome.results
        self._result_token = token
        self.notices.succeed(PREDICTION_SUCCEEDED)
        return self.explained_prediction()

    def explained_prediction(self) -> Optional[ExplainedPrediction]:
        """The combined prediction view, or None unless both results of the latest submission are in."""
        if self.prediction is None or self.explanation is None or self.model is None:
            return None
        if self._result_token is None or self._result_token != self._latest:
            return None
        return ExplainedPrediction.combine(
            self.model,
            self.prediction,
            self.explanation,
            self._result_token.input_data(),
        )

    def _clear_results(self) -> None:
        self.prediction = None
        self.explanation = None
        self._result_token = None
