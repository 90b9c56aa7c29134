"""Tests for the Streamlit dashboard, driven through Streamlit's AppTest harness."""
import time
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from conftest import make_response
from notifications.channel import NotificationChannel
from workflow.controller import WorkflowController

APP_PATH = str(Path(__file__).resolve().parent.parent / "app.py")


def _start(controller):
    at = AppTest.from_file(APP_PATH, default_timeout=10)
    at.session_state["controller"] = controller
    return at.run()


@pytest.fixture
def app(controller):
    return _start(controller)


def test_refetching_features_clears_typed_values(app, controller, http):
    http.request.return_value = make_response(200, {"features": ["x1", "x2"]})
    app.radio(key="predict_mode").set_value("manual").run()
    app.text_input(key="selected_model").input("KNN").run()

    app.button(key="get_features").click().run()
    assert controller.state.features == ["x1", "x2"]

    app.text_input(key="feature_1_x1").input("5").run()
    assert controller.state.input_values == {"x1": "5"}

    app.button(key="get_features").click().run()
    assert controller.state.input_values == {}
    assert app.text_input(key="feature_2_x1").value == ""

    app.run()
    assert controller.state.input_values == {}

    app.text_input(key="feature_2_x2").input("7").run()
    app.button(key="predict").click().run()

    # Two feature fetches; the partially filled predict never left the client.
    assert http.request.call_count == 2
    assert controller.state.input_values == {"x2": "7"}
    assert controller.channel.current.message == "Please fill all feature values for manual prediction."


def test_training_result_shows_in_model_name_field(app, controller, http, csv_dataset):
    controller.select_dataset(csv_dataset)
    app.text_input(key="target_column").input("y").run()
    http.request.return_value = make_response(200, {
        "best_model": "Random Forest", "score": 0.91, "metrics": {}, "all_models": {},
    })

    app.button(key="train_all").click().run()

    assert controller.state.selected_model == "Random Forest"
    assert app.text_input(key="selected_model").value == "Random Forest"


def test_notification_leaves_screen_after_window(client):
    channel = NotificationChannel(timeout=0.2)
    controller = WorkflowController(client=client, channel=channel)
    app = _start(controller)

    app.button(key="predict").click().run()
    assert [e.value for e in app.error] == ["Please select a model to predict."]

    time.sleep(0.5)
    app.run()

    assert channel.current is None
    assert [e.value for e in app.error] == []


def test_dismiss_button_clears_notification(app, controller):
    app.button(key="predict").click().run()
    assert len(app.error) == 1

    app.button(key="dismiss_notification").click().run()

    assert controller.channel.current is None
    assert len(app.error) == 0
