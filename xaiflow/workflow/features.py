"""
Feature selection for a training run.

Loads a dataset's column schema, holds the chosen target variable and the
selected feature subset. The target is never part of the selection.
"""

from typing import List, Optional, Set

from loguru import logger

from xaiflow.exceptions import FeatureSelectionError, WorkflowValidationError
from xaiflow.schemas import DatasetSchema
from xaiflow.workflow.state import DATASET_LOAD_FAILED, Notices, Status


class FeatureSelection:
    """Dataset schema + target + selected features for one workflow session."""

    def __init__(self, service):
        self._service = service
        self.dataset_id: Optional[int] = None
        self.schema: Optional[DatasetSchema] = None
        self.target_variable: Optional[str] = None
        self._selected: Set[str] = set()
        self.loading = False
        self.notices = Notices()
        self._fetch_seq = 0

    @property
    def status(self) -> Status:
        return Status.LOADING if self.loading else Status.IDLE

    @property
    def headers(self) -> List[str]:
        return list(self.schema.headers) if self.schema else []

    async def set_dataset(self, dataset_id: Optional[int]) -> Optional[DatasetSchema]:
        """
        Select a dataset and fetch its schema.

        Target and features are reset. On failure the id stays selected but no
        schema is available, so the pickers are empty. A fetch overtaken by a
        later call is dropped.
        """
        self._fetch_seq += 1
        seq = self._fetch_seq
        self.dataset_id = dataset_id
        self.schema = None
        self._reset_selection()
        self.notices.clear()
        if dataset_id is None:
            self.loading = False
            return None

        self.loading = True
        try:
            schema = await self._service.get_dataset(dataset_id)
        except Exception as e:
            if seq != self._fetch_seq:
                return None
            self.loading = False
            logger.warning("Loading dataset {} failed: {}", dataset_id, e)
            self.notices.fail(DATASET_LOAD_FAILED)
            return None

        if seq != self._fetch_seq:
            logger.debug("Dropping schema of dataset {}: selection changed", dataset_id)
            return None
        self.loading = False
        self.schema = schema
        self._reset_selection()
        logger.debug("Dataset {} loaded with {} columns", dataset_id, len(schema.headers))
        return schema

    def set_target(self, column: Optional[str]) -> None:
        """Choose the target column (None to unset). It leaves the feature selection if present."""
        if column is None:
            self.target_variable = None
            return
        if column not in self.headers:
            raise WorkflowValidationError(f"Unknown column: {column}")
        self.target_variable = column
        self._selected.discard(column)

    def toggle_feature(self, column: str) -> bool:
        """
        Add ``column`` to the selection, or remove it if already selected.

        Returns True if the column is selected afterwards. The target, unknown
        columns and any toggle before a target is chosen are refused.
        """
        if self.target_variable is None:
            raise FeatureSelectionError("Choose a target variable before selecting features")
        if column == self.target_variable:
            raise FeatureSelectionError(f"'{column}' is the target variable and cannot be a feature")
        if column not in self.headers:
            raise FeatureSelectionError(f"Unknown column: {column}")
        if column in self._selected:
            self._selected.remove(column)
            return False
        self._selected.add(column)
        return True

    def select_all(self) -> None:
        """Select every available feature."""
        if self.target_variable is None:
            raise FeatureSelectionError("Choose a target variable before selecting features")
        self._selected = set(self.available_features())

    def clear_features(self) -> None:
        self._selected = set()

    def available_features(self) -> List[str]:
        """Headers minus the target, in header order."""
        return [h for h in self.headers if h != self.target_variable]

    def selected_features(self) -> List[str]:
        """The selection, in header order."""
        return [h for h in self.headers if h in self._selected]

    def can_select_features(self) -> bool:
        return self.schema is not None and self.target_variable is not None

    def _reset_selection(self) -> None:
        self.target_variable = None
        self._selected = set()
