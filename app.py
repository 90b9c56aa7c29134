import asyncio
import json

import pandas as pd
import streamlit as st

from config import MODEL_CHOICES
from state.results import ClassificationResult
from state.session_state import DatasetHandle, PredictMode, Severity
from workflow.controller import WorkflowController

# --- Page Setup ---
st.set_page_config(
    page_title="ML Dashboard",
    page_icon="🧠",
    layout="wide"
)

# --- Session State Initialization ---
if "controller" not in st.session_state:
    st.session_state.controller = WorkflowController()

controller: WorkflowController = st.session_state.controller

# --- Helper Functions ---
def to_handle(uploaded_file):
    """Wraps a Streamlit UploadedFile so the workflow never touches Streamlit objects."""
    if uploaded_file is None:
        return None
    return DatasetHandle(
        name=uploaded_file.name,
        size=uploaded_file.size,
        content_type=uploaded_file.type or "",
        content=uploaded_file.getvalue(),
    )

def run_action(action, label):
    """Runs a remote action behind a spinner; the spinner is the busy overlay."""
    with st.spinner(label):
        asyncio.run(action())
    st.rerun()

def controlled(key, value):
    """
    Shows the controller's value in the widget under `key`. Widgets are
    written back only through their on_change callbacks, so the controller
    stays the single source of truth.
    """
    st.session_state[key] = value
    return key

def push(key, setter, *args):
    """on_change callback that hands a widget's new value to the controller."""
    setter(*args, st.session_state[key])

def on_dataset_change():
    controller.select_dataset(to_handle(st.session_state.dataset_file))

def on_predict_file_change():
    controller.select_predict_file(to_handle(st.session_state.predict_file))

@st.fragment(run_every=1)
def render_notification():
    # Reruns on its own so an expired notification leaves the screen.
    notification = controller.channel.current
    if notification is None:
        return
    show = {
        Severity.ERROR: st.error,
        Severity.SUCCESS: st.success,
        Severity.INFO: st.info,
    }[notification.severity]
    col_msg, col_close = st.columns([12, 1])
    with col_msg:
        show(notification.message)
    with col_close:
        st.button("✕", key="dismiss_notification", on_click=controller.dismiss_notification)

# --- Header ---
st.title("🧠 ML Dashboard")
render_notification()
state = controller.state

# --- 1. Upload ---
st.header("1. Upload Your Dataset")
st.file_uploader("Select a CSV file", type="csv", key="dataset_file", on_change=on_dataset_change)
if st.button("Upload", key="upload", disabled=controller.busy):
    run_action(controller.upload, "Uploading dataset...")

if state.upload is not None:
    st.markdown("**File Details:**")
    st.write(f"**Filename:** {state.upload.filename}")
    st.write(f"**Total Rows:** {state.upload.rows}")
    st.write(f"**Columns:** {', '.join(state.upload.columns)}")
    st.markdown("**Data Preview (First 5 Rows):**")
    try:
        st.dataframe(pd.DataFrame(state.upload.preview))
    except ValueError:
        st.code(json.dumps(state.upload.preview, indent=2))

# --- 2. Train ---
st.header("2. Train Your ML Model")
col_target, col_model = st.columns(2)
with col_target:
    st.text_input("Target Column", key=controlled("target_column", state.target_column),
                  on_change=push, args=("target_column", controller.set_target_column))
with col_model:
    options = [""] + MODEL_CHOICES
    current = state.model_choice if state.model_choice in options else ""
    st.selectbox("Model", options, format_func=lambda m: m or "Select a Model",
                 key=controlled("model_choice", current),
                 on_change=push, args=("model_choice", controller.set_model_choice))

col_train, col_train_all = st.columns(2)
with col_train:
    if st.button("Train Selected Model", key="train", disabled=controller.busy):
        run_action(controller.train, "Training model...")
with col_train_all:
    if st.button("Train All & Pick Best", key="train_all", disabled=controller.busy):
        run_action(controller.train_all, "Training all models...")

if state.train_result is not None:
    result = state.train_result
    st.subheader("Training Results")
    st.write(f"**Model Trained:** {result.model}")
    st.write(f"**Task Type:** {result.task.capitalize()}")
    if isinstance(result, ClassificationResult):
        st.write(f"**Accuracy:** {result.accuracy:.4f}")
        st.write(f"**Precision:** {result.precision:.4f}")
        st.write(f"**Recall:** {result.recall:.4f}")
        st.write(f"**F1 Score:** {result.f1_score:.4f}")
        st.markdown("**Confusion Matrix:**")
        st.dataframe(pd.DataFrame(result.confusion_matrix,
                                  index=result.classes or None, columns=result.classes or None))
    else:
        st.write(f"**Mean Squared Error:** {result.mean_squared_error:.4f}")
        st.write(f"**Mean Absolute Error:** {result.mean_absolute_error:.4f}")
        st.write(f"**R2 Score:** {result.r2_score:.4f}")

if state.train_all_result is not None:
    best = state.train_all_result
    st.subheader("Best Model Found")
    st.write(f"**Best Model:** {best.best_model}")
    st.write(f"**Score:** {best.score:.4f}")
    st.markdown("**Metrics:**")
    st.json(best.metrics)
    st.markdown("**All Models Performance:**")
    st.json(best.all_models)

# --- 3. Predict ---
st.header("3. Make Predictions")
st.radio("Prediction mode", [m.value for m in PredictMode],
         format_func=lambda m: "File Upload" if m == PredictMode.FILE.value else "Manual Input",
         horizontal=True,
         key=controlled("predict_mode", state.predict_mode.value),
         on_change=push, args=("predict_mode", controller.set_predict_mode))

st.text_input("Trained Model Name", key=controlled("selected_model", state.selected_model),
              on_change=push, args=("selected_model", controller.set_selected_model))

if state.predict_mode == PredictMode.FILE:
    st.file_uploader("Choose a CSV file for prediction", type="csv",
                     key="predict_file", on_change=on_predict_file_change)
else:
    if st.button("Get Features", key="get_features", disabled=controller.busy):
        run_action(controller.fetch_features, "Fetching input features...")
    for feature in state.features:
        key = f"feature_{state.feature_set_version}_{feature}"
        st.text_input(feature, key=controlled(key, state.input_values.get(feature, "")),
                      on_change=push, args=(key, controller.set_input_value, feature))

if st.button("Predict", key="predict", disabled=controller.busy):
    run_action(controller.predict, "Predicting...")

prediction = controller.state.prediction
if prediction is not None:
    st.subheader("Prediction Result")
    if prediction.kind == "predictions":
        st.dataframe(pd.DataFrame({"Row": range(1, len(prediction.predictions) + 1),
                                   "Prediction": prediction.predictions}))
    elif prediction.kind == "prediction":
        st.success(f"Prediction: {json.dumps(prediction.prediction)}")
    else:
        st.error(f"Error: {prediction.error}")
