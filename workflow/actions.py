"""
Command handlers for every user action on the dashboard.

Each handler reads the current `SessionState`, does its work and returns an
`Outcome`: the field updates to merge into the state plus an optional
notification. Failures never move the stage, so the user can retry right away.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

from errors import ServiceError, ValidationFailure
from payload import request_builder
from service.api_client import MLServiceClient
from state.results import PredictionResult
from state.session_state import DatasetHandle, PredictMode, SessionState, Severity, Stage

logger = logging.getLogger(__name__)


class Outcome(BaseModel):
    updates: Dict[str, Any] = {}
    message: Optional[str] = None
    severity: Severity = Severity.INFO

    @classmethod
    def failure(cls, message: str, updates: Optional[Dict[str, Any]] = None) -> "Outcome":
        return cls(updates=updates or {}, message=message, severity=Severity.ERROR)


# --- Local edits (no network) ---

def select_dataset(state: SessionState, dataset: Optional[DatasetHandle]) -> Outcome:
    if dataset is None:
        logger.info("Dataset selection cleared")
        updates = {"dataset": None, "upload": None}
        if state.stage in (Stage.DATASET_SELECTED, Stage.UPLOADED):
            updates["stage"] = Stage.IDLE
        return Outcome(updates=updates)
    if not dataset.is_csv:
        logger.warning(f"Rejected dataset '{dataset.name}': {dataset.content_type}")
        return Outcome.failure("Please upload a valid CSV file.")

    logger.info(f"Dataset selected: {dataset.name} ({dataset.size} bytes)")
    return Outcome(
        updates={"dataset": dataset, "upload": None, "stage": Stage.DATASET_SELECTED},
        message="CSV file selected!",
        severity=Severity.INFO,
    )


def select_predict_file(state: SessionState, predict_file: Optional[DatasetHandle]) -> Outcome:
    if predict_file is None:
        return Outcome(updates={"predict_file": None})
    if not predict_file.is_csv:
        return Outcome.failure("Please upload a valid CSV file for prediction.")
    return Outcome(updates={"predict_file": predict_file}, message="Prediction CSV file selected!")


def set_target_column(state: SessionState, target_column: str) -> Outcome:
    return Outcome(updates={"target_column": target_column})


def set_model_choice(state: SessionState, model_choice: str) -> Outcome:
    return Outcome(updates={"model_choice": model_choice})


def set_selected_model(state: SessionState, model_name: str) -> Outcome:
    return Outcome(updates={"selected_model": model_name})


def set_predict_mode(state: SessionState, mode: PredictMode) -> Outcome:
    return Outcome(updates={"predict_mode": PredictMode(mode)})


def set_input_value(state: SessionState, feature: str, value: str) -> Outcome:
    if feature not in state.features:
        logger.warning(f"Ignoring value for unknown feature '{feature}'")
        return Outcome()
    return Outcome(updates={"input_values": {**state.input_values, feature: value}})


# --- Remote actions ---

async def upload(state: SessionState, client: MLServiceClient) -> Outcome:
    logger.info("--- Executing Upload ---")
    try:
        request = request_builder.build_upload_request(state.dataset)
        result = await client.upload(request)
    except ValidationFailure as e:
        return Outcome.failure(e.message)
    except ServiceError as e:
        return Outcome.failure(f"Failed to upload file: {e.message}")

    logger.info(f"Uploaded '{result.filename}': {result.rows} rows, {len(result.columns)} columns")
    return Outcome(
        updates={"upload": result, "stage": Stage.UPLOADED},
        message="File uploaded successfully!",
        severity=Severity.SUCCESS,
    )


async def train(state: SessionState, client: MLServiceClient) -> Outcome:
    logger.info("--- Executing Train ---")
    try:
        request = request_builder.build_train_request(state.dataset, state.target_column, state.model_choice)
        result = await client.train(request)
    except ValidationFailure as e:
        return Outcome.failure(e.message)
    except ServiceError as e:
        return Outcome.failure(f"Training failed: {e.message}")

    logger.info(f"Trained {result.model} ({result.task})")
    return Outcome(
        updates={"train_result": result, "selected_model": result.model, "stage": Stage.TRAINED},
        message=f"{result.model} trained successfully!",
        severity=Severity.SUCCESS,
    )


async def train_all(state: SessionState, client: MLServiceClient) -> Outcome:
    logger.info("--- Executing Train All ---")
    try:
        request = request_builder.build_train_all_request(state.dataset, state.target_column)
        result = await client.train_all(request)
    except ValidationFailure as e:
        return Outcome.failure(e.message)
    except ServiceError as e:
        return Outcome.failure(f"Training all models failed: {e.message}")

    logger.info(f"Best model: {result.best_model} (score {result.score})")
    return Outcome(
        updates={"train_all_result": result, "selected_model": result.best_model, "stage": Stage.TRAINED},
        message=f"Best model ({result.best_model}) found and trained!",
        severity=Severity.SUCCESS,
    )


async def fetch_features(state: SessionState, client: MLServiceClient) -> Outcome:
    logger.info("--- Executing Get Input Features ---")
    try:
        request = request_builder.build_features_request(state.selected_model)
        features = await client.get_input_features(request)
    except ValidationFailure as e:
        return Outcome.failure(e.message)
    except ServiceError as e:
        return Outcome.failure(f"Failed to fetch input features: {e.message}")

    logger.info(f"Model '{state.selected_model}' expects {len(features)} features")
    return Outcome(
        updates={
            "features": features,
            "input_values": {},
            "feature_set_version": state.feature_set_version + 1,
            "prediction": None,
            "stage": Stage.FEATURES_FETCHED,
        },
        message="Input features fetched!",
    )


async def predict(state: SessionState, client: MLServiceClient) -> Outcome:
    logger.info(f"--- Executing Predict ({state.predict_mode.value}) ---")
    try:
        if state.predict_mode == PredictMode.FILE:
            request = request_builder.build_file_predict_request(state.selected_model, state.predict_file)
        else:
            request = request_builder.build_manual_predict_request(
                state.selected_model, state.features, state.input_values
            )
    except ValidationFailure as e:
        return Outcome.failure(e.message)

    try:
        result = await client.predict(request)
    except ServiceError as e:
        return Outcome.failure(
            f"Prediction failed: {e.message}",
            updates={"prediction": PredictionResult.failed(e.message)},
        )

    return Outcome(
        updates={"prediction": result, "stage": Stage.PREDICTED},
        message="Prediction successful!",
        severity=Severity.SUCCESS,
    )
