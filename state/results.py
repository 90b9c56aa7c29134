from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

# --- Response Models for the Remote Service ---

class UploadResult(BaseModel):
    filename: str
    rows: int
    columns: List[str]
    preview: List[Any] = []


class ClassificationResult(BaseModel):
    model: str
    task: Literal["classification"]
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    confusion_matrix: List[List[int]] = []
    classes: List[Any] = []


class RegressionResult(BaseModel):
    model: str
    task: Literal["regression"]
    mean_squared_error: float
    mean_absolute_error: float
    r2_score: float


TrainResult = Annotated[Union[ClassificationResult, RegressionResult], Field(discriminator="task")]
train_result_adapter = TypeAdapter(TrainResult)


class TrainAllResult(BaseModel):
    best_model: str
    score: float
    metrics: Dict[str, Any] = {}
    all_models: Dict[str, Any] = {}


class FeatureSet(BaseModel):
    features: Optional[List[str]] = None


class PredictionResult(BaseModel):
    """
    Outcome of a predict call. Exactly one of `prediction` (a single scalar),
    `predictions` (one value per input row) or `error` is populated.
    """
    prediction: Any = None
    predictions: Optional[List[Any]] = None
    error: Optional[str] = None
    kind: Literal["prediction", "predictions", "error"] = "prediction"

    @model_validator(mode="before")
    @classmethod
    def _pick_single_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # Precedence: error > predictions > prediction
        if data.get("error"):
            return {"error": str(data["error"]), "kind": "error"}
        if data.get("predictions") is not None:
            return {"predictions": data["predictions"], "kind": "predictions"}
        if "prediction" in data:
            return {"prediction": data["prediction"], "kind": "prediction"}
        raise ValueError("response carries none of 'prediction', 'predictions' or 'error'")

    @classmethod
    def failed(cls, message: str) -> "PredictionResult":
        return cls(error=message)
