"""Tests for the training request builder and gate."""
import asyncio

import pytest

from xaiflow.exceptions import ModelServiceError, WorkflowValidationError
from xaiflow.schemas import ModelType, TrainingSpec
from xaiflow.workflow import FeatureSelection, Status, TrainingGate


def _gate(service, on_model_trained=None) -> TrainingGate:
    service.add_dataset(1, ["age", "income", "label"])
    fs = FeatureSelection(service)
    asyncio.run(fs.set_dataset(1))
    return TrainingGate(service, fs, on_model_trained=on_model_trained)


def _fill(gate: TrainingGate) -> None:
    gate.set_model_name("churn")
    gate.features.set_target("label")
    gate.features.toggle_feature("age")


def test_can_submit_requires_every_field(service):
    """Name, target and at least one feature are all required."""
    gate = _gate(service)
    assert not gate.can_submit()
    gate.set_model_name("churn")
    assert not gate.can_submit()
    gate.features.set_target("label")
    assert not gate.can_submit()
    gate.features.toggle_feature("age")
    assert gate.can_submit()


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_model_name_blocks_submit(service, name):
    gate = _gate(service)
    _fill(gate)
    gate.set_model_name(name)
    assert not gate.can_submit()
    assert "model name" in gate.missing_fields()


def test_empty_features_blocks_submit_without_network(service):
    """Empty feature selection: gate closed, submit reports a validation error and sends nothing."""
    gate = _gate(service)
    _fill(gate)
    gate.features.toggle_feature("age")
    assert not gate.can_submit()
    assert asyncio.run(gate.submit()) is None
    assert gate.notices.error == "Please fill in all required fields"
    assert service.count("train_model") == 0
    assert gate.status == Status.IDLE


def test_can_submit_requires_dataset(service):
    gate = TrainingGate(service, FeatureSelection(service))
    gate.set_model_name("m")
    assert not gate.can_submit()
    assert "dataset" in gate.missing_fields()


def test_build_spec(service):
    gate = _gate(service)
    _fill(gate)
    gate.features.toggle_feature("income")
    gate.set_model_type("regression")
    spec = gate.build_spec()
    assert spec.to_payload() == {
        "datasetId": 1,
        "modelName": "churn",
        "modelType": "REGRESSION",
        "targetVariable": "label",
        "featureNames": ["age", "income"],
    }


def test_build_spec_incomplete_raises(service):
    gate = _gate(service)
    with pytest.raises(WorkflowValidationError):
        gate.build_spec()


def test_training_spec_rejects_target_in_features():
    with pytest.raises(ValueError):
        TrainingSpec(dataset_id=1, model_name="m", target_variable="y", feature_names=["x", "y"])


def test_set_model_type_unknown_raises(service):
    gate = _gate(service)
    with pytest.raises(WorkflowValidationError):
        gate.set_model_type("clustering")
    assert gate.model_type == ModelType.CLASSIFICATION


def test_submit_success_notifies_and_resets_form(service):
    """Success: notice, callback, form cleared, back to idle."""
    refreshed = []
    gate = _gate(service, on_model_trained=lambda: refreshed.append(True))
    _fill(gate)
    model = asyncio.run(gate.submit())
    assert model is not None
    assert model.feature_names == ["age"]
    assert gate.notices.success == "Model trained successfully!"
    assert gate.notices.error == ""
    assert refreshed == [True]
    assert gate.model_name == ""
    assert gate.features.target_variable is None
    assert gate.features.selected_features() == []
    assert gate.status == Status.IDLE
    sent = service.calls[-1][1][0]
    assert sent.target_variable == "label"


def test_submit_awaits_async_callback(service):
    calls = []

    async def refresh():
        calls.append("refreshed")

    gate = _gate(service, on_model_trained=refresh)
    _fill(gate)
    asyncio.run(gate.submit())
    assert calls == ["refreshed"]


def test_submit_failure_uses_service_message(service):
    service.failures["train_model"] = ModelServiceError("Train failed", status_code=400, service_message="Target has one class")
    gate = _gate(service)
    _fill(gate)
    assert asyncio.run(gate.submit()) is None
    assert gate.notices.error == "Target has one class"
    assert gate.status == Status.IDLE
    # form kept so the user can retry
    assert gate.model_name == "churn"
    assert gate.can_submit()


def test_submit_failure_generic_message(service):
    service.failures["train_model"] = ConnectionError("refused")
    gate = _gate(service)
    _fill(gate)
    asyncio.run(gate.submit())
    assert gate.notices.error == "Training failed"
    assert not gate.training


def test_second_submit_while_training_is_noop(service):
    """Only one training request in flight; the gate is closed meanwhile."""
    gate = _gate(service)
    _fill(gate)

    async def scenario():
        release = service.gate("train_model")
        first = asyncio.ensure_future(gate.submit())
        await asyncio.sleep(0)
        assert gate.training
        assert gate.status == Status.TRAINING
        assert not gate.can_submit()
        assert await gate.submit() is None
        release.set()
        return await first

    model = asyncio.run(scenario())
    assert model is not None
    assert service.count("train_model") == 1
