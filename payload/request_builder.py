"""
Request payloads for each workflow action.

Every builder checks its preconditions first and raises `ValidationFailure`
when one is not met, so nothing incomplete is ever sent to the service.
"""
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from config import CSV_CONTENT_TYPE, MANUAL_INPUT_FILENAME, MODEL_CHOICES
from errors import ValidationFailure
from payload.csv_encoder import encode_row
from state.session_state import DatasetHandle

logger = logging.getLogger(__name__)

FileField = Tuple[str, bytes, str]


class ServiceRequest(BaseModel):
    method: str
    path: str
    files: Dict[str, FileField] = {}
    data: Dict[str, str] = {}
    params: Dict[str, str] = {}

    def describe(self) -> str:
        return f"{self.method} {self.path}"


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def build_upload_request(dataset: Optional[DatasetHandle]) -> ServiceRequest:
    if dataset is None:
        raise ValidationFailure("Please select a file to upload.")
    return ServiceRequest(method="POST", path="/upload", files={"file": dataset.as_upload()})


def build_train_request(dataset: Optional[DatasetHandle], target_column: str, model_name: str) -> ServiceRequest:
    if dataset is None or not _present(target_column) or not _present(model_name):
        raise ValidationFailure("Please select a file, target column, and model to train.")
    if model_name not in MODEL_CHOICES:
        raise ValidationFailure(f"Unknown model '{model_name}'. Choose one of: {', '.join(MODEL_CHOICES)}")

    return ServiceRequest(
        method="POST",
        path="/train",
        files={"file": dataset.as_upload()},
        data={"target_column": target_column.strip(), "model_name": model_name},
    )


def build_train_all_request(dataset: Optional[DatasetHandle], target_column: str) -> ServiceRequest:
    if dataset is None or not _present(target_column):
        raise ValidationFailure("Please select a file and target column to train all models.")

    return ServiceRequest(
        method="POST",
        path="/train_all",
        files={"file": dataset.as_upload()},
        data={"target_column": target_column.strip()},
    )


def build_features_request(model_name: str) -> ServiceRequest:
    if not _present(model_name):
        raise ValidationFailure("Please select a model first to get its required features.")
    return ServiceRequest(method="GET", path="/get_input_features", params={"model_name": model_name.strip()})


def build_file_predict_request(model_name: str, predict_file: Optional[DatasetHandle]) -> ServiceRequest:
    if not _present(model_name):
        raise ValidationFailure("Please select a model to predict.")
    if predict_file is None:
        raise ValidationFailure("Upload CSV file for prediction.")

    return ServiceRequest(
        method="POST",
        path="/predict",
        files={"file": predict_file.as_upload()},
        data={"model_name": model_name.strip()},
    )


def build_manual_predict_request(
    model_name: str, features: Sequence[str], input_values: Mapping[str, Any]
) -> ServiceRequest:
    """Synthesizes a one-row CSV from the typed-in values and sends it as the prediction file."""
    if not _present(model_name):
        raise ValidationFailure("Please select a model to predict.")
    if not features:
        raise ValidationFailure("Please fetch features first and fill values for manual prediction.")

    unfilled = [f for f in features if input_values.get(f) is None or not str(input_values[f]).strip()]
    if unfilled:
        logger.warning(f"Manual prediction rejected, unfilled features: {unfilled}")
        raise ValidationFailure("Please fill all feature values for manual prediction.")

    document = encode_row(features, {f: str(input_values[f]) for f in features})
    return ServiceRequest(
        method="POST",
        path="/predict",
        files={"file": (MANUAL_INPUT_FILENAME, document.encode("utf-8"), CSV_CONTENT_TYPE)},
        data={"model_name": model_name.strip()},
    )
