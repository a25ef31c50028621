"""
Pydantic schemas for the model service payloads and the workflow views.

Field names are snake_case in Python and camelCase on the wire
(``fileName``, ``featureNames`` ...). Parse with ``Model.model_validate(json)``
and serialize with ``model_dump(by_alias=True)``.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# Feature name -> numeric string as typed by the user
PredictionInput = Dict[str, str]


class ModelType(str, Enum):
    CLASSIFICATION = "CLASSIFICATION"
    REGRESSION = "REGRESSION"


class _WireModel(BaseModel):
    """Base for service payloads: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )


class DatasetSummary(_WireModel):
    """One entry of GET /datasets."""
    id: int
    file_name: str = ""
    row_count: Optional[int] = None

    def label(self) -> str:
        rows = self.row_count if self.row_count is not None else "?"
        return f"{self.file_name} ({rows} rows)"


class DatasetSchema(DatasetSummary):
    """GET /datasets/{id}: the summary plus the ordered column names."""
    headers: List[str] = Field(default_factory=list)
    upload_date: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class TrainingSpec(_WireModel):
    """
    Body of POST /models/train.

    Built fresh for each training attempt and never mutated afterwards.
    """
    dataset_id: int
    model_name: str
    model_type: ModelType = ModelType.CLASSIFICATION
    target_variable: str
    feature_names: List[str]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_consistency(self) -> "TrainingSpec":
        if not self.model_name.strip():
            raise ValueError("model_name must not be blank")
        if not self.target_variable:
            raise ValueError("target_variable is required")
        if not self.feature_names:
            raise ValueError("feature_names must not be empty")
        if self.target_variable in self.feature_names:
            raise ValueError(f"target variable '{self.target_variable}' cannot also be a feature")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TrainedModel(_WireModel):
    """A model as reported by the service. The client only reads it."""
    id: int
    model_name: str = ""
    model_type: ModelType = ModelType.CLASSIFICATION
    target_variable: Optional[str] = None
    feature_names: List[str] = Field(default_factory=list)
    accuracy: Optional[float] = None
    training_date: Optional[datetime] = None

    def accuracy_display(self) -> str:
        if self.accuracy is None:
            return "N/A"
        return f"{self.accuracy * 100:.2f}%"

    def summary(self) -> str:
        return (
            f"{self.model_name} | Type: {self.model_type.value} | "
            f"Target: {self.target_variable} | Accuracy: {self.accuracy_display()}"
        )


class PredictionResult(_WireModel):
    """POST /models/{id}/predict. Opaque beyond the fields below."""
    prediction: Any = None
    confidence: Optional[float] = None
    probabilities: Optional[Dict[str, Any]] = None
    input_data: Optional[Dict[str, str]] = None


class FeatureContribution(_WireModel):
    feature_name: str
    contribution: Optional[float] = None
    direction: Optional[str] = None  # "positive" or "negative"


class ExplanationResult(_WireModel):
    """POST /models/{id}/explain. Opaque beyond the fields below."""
    prediction: Any = None
    feature_contributions: List[FeatureContribution] = Field(default_factory=list)
    input_data: Optional[Dict[str, str]] = None
    explanation_text: Optional[str] = None


class InputField(BaseModel):
    """One entry of the prediction input form, derived from a model's feature list."""
    name: str
    kind: str = "number"
    required: bool = True
    value: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def filled(self) -> bool:
        return self.value != ""


class ExplainedPrediction(BaseModel):
    """
    Combined view of one prediction and its explanation.

    Only built when both results of the same submission are available.
    """
    model_id: int
    model_type: ModelType
    prediction: Any = None
    confidence: Optional[float] = None
    probabilities: Dict[str, Any] = Field(default_factory=dict)
    explanation: ExplanationResult
    input_data: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    @classmethod
    def combine(
        cls,
        model: TrainedModel,
        prediction: PredictionResult,
        explanation: ExplanationResult,
        input_data: PredictionInput,
    ) -> "ExplainedPrediction":
        return cls(
            model_id=model.id,
            model_type=model.model_type,
            prediction=prediction.prediction,
            confidence=prediction.confidence,
            probabilities=dict(prediction.probabilities or {}),
            explanation=explanation,
            input_data=dict(input_data),
        )

    @property
    def is_classification(self) -> bool:
        return self.model_type == ModelType.CLASSIFICATION

    def top_contributions(self, n: Optional[int] = None) -> List[FeatureContribution]:
        """Contributions ordered by absolute size, largest first."""
        ordered = sorted(
            self.explanation.feature_contributions,
            key=lambda c: abs(c.contribution or 0.0),
            reverse=True,
        )
        return ordered if n is None else ordered[:n]
