from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from config import CSV_CONTENT_TYPE
from state.results import ClassificationResult, PredictionResult, RegressionResult, TrainAllResult, UploadResult


class Stage(str, Enum):
    IDLE = "idle"
    DATASET_SELECTED = "dataset_selected"
    UPLOADED = "uploaded"
    TRAINED = "trained"
    FEATURES_FETCHED = "features_fetched"
    PREDICTED = "predicted"


class PredictMode(str, Enum):
    FILE = "file"
    MANUAL = "manual"


class Severity(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


class DatasetHandle(BaseModel):
    """A CSV file picked by the user, held in memory until it is sent."""
    name: str
    size: int
    content_type: str
    content: bytes = Field(default=b"", repr=False)

    @property
    def is_csv(self) -> bool:
        return self.content_type == CSV_CONTENT_TYPE

    def as_upload(self):
        """The `(filename, bytes, content type)` triple `requests` expects for a file field."""
        return (self.name, self.content, self.content_type)


class SessionState(BaseModel):
    """
    Everything the dashboard knows about the current session. Handlers never
    mutate it in place: they return updates that are merged with `model_copy`.
    """
    stage: Stage = Stage.IDLE

    # --- Dataset & training inputs ---
    dataset: Optional[DatasetHandle] = None
    target_column: str = ""
    model_choice: str = ""
    upload: Optional[UploadResult] = None
    train_result: Optional[Union[ClassificationResult, RegressionResult]] = None
    train_all_result: Optional[TrainAllResult] = None

    # --- Prediction inputs ---
    # Free text: filled in by training, but the user may point it at any model the service knows.
    selected_model: str = ""
    predict_mode: PredictMode = PredictMode.FILE
    predict_file: Optional[DatasetHandle] = None
    features: List[str] = []
    # Bumped on every successful feature fetch; the input form keys its fields by it.
    feature_set_version: int = 0
    input_values: Dict[str, str] = {}
    prediction: Optional[PredictionResult] = None

    def summary(self) -> Dict[str, Any]:
        """A log-friendly view of the session without file contents."""
        summary = {
            "stage": self.stage.value,
            "dataset": self.dataset.name if self.dataset else None,
            "target_column": self.target_column or None,
            "selected_model": self.selected_model or None,
            "predict_mode": self.predict_mode.value,
            "features": len(self.features) or None,
        }
        return {k: v for k, v in summary.items() if v is not None}
