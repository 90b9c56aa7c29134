import logging
from typing import Awaitable, Callable, Optional

from notifications.channel import NotificationChannel
from service.api_client import MLServiceClient
from state.session_state import DatasetHandle, PredictMode, SessionState, Severity
from workflow import actions
from workflow.actions import Outcome

logger = logging.getLogger(__name__)

RemoteAction = Callable[[SessionState, MLServiceClient], Awaitable[Outcome]]


class WorkflowController:
    """
    Drives one dashboard session through upload -> train -> features -> predict.

    Owns the session state, the notification channel and the `busy` flag. Only
    one remote action runs at a time; a second one started while `busy` is set
    is refused with a notification.
    """

    def __init__(self, client: Optional[MLServiceClient] = None,
                 channel: Optional[NotificationChannel] = None,
                 state: Optional[SessionState] = None):
        self.client = client or MLServiceClient()
        self.channel = channel or NotificationChannel()
        self.state = state or SessionState()
        self.busy = False

    def _apply(self, outcome: Outcome) -> None:
        if outcome.updates:
            self.state = self.state.model_copy(update=outcome.updates)
        if outcome.message:
            self.channel.publish(outcome.message, outcome.severity)

    async def _run(self, action: RemoteAction) -> None:
        if self.busy:
            self.channel.publish("Another request is still in progress.", Severity.INFO)
            return

        self.busy = True
        try:
            outcome = await action(self.state, self.client)
        except Exception:
            logger.error(f"Unexpected failure in {action.__name__}", exc_info=True)
            raise
        finally:
            self.busy = False

        self._apply(outcome)
        logger.info(f"Session after {action.__name__}: {self.state.summary()}")

    # --- Remote actions ---

    async def upload(self) -> None:
        await self._run(actions.upload)

    async def train(self) -> None:
        await self._run(actions.train)

    async def train_all(self) -> None:
        await self._run(actions.train_all)

    async def fetch_features(self) -> None:
        await self._run(actions.fetch_features)

    async def predict(self) -> None:
        await self._run(actions.predict)

    # --- Local edits ---

    def select_dataset(self, dataset: Optional[DatasetHandle]) -> None:
        self._apply(actions.select_dataset(self.state, dataset))

    def select_predict_file(self, predict_file: Optional[DatasetHandle]) -> None:
        self._apply(actions.select_predict_file(self.state, predict_file))

    def set_target_column(self, target_column: str) -> None:
        self._apply(actions.set_target_column(self.state, target_column))

    def set_model_choice(self, model_choice: str) -> None:
        self._apply(actions.set_model_choice(self.state, model_choice))

    def set_selected_model(self, model_name: str) -> None:
        self._apply(actions.set_selected_model(self.state, model_name))

    def set_predict_mode(self, mode: PredictMode) -> None:
        self._apply(actions.set_predict_mode(self.state, mode))

    def set_input_value(self, feature: str, value: str) -> None:
        self._apply(actions.set_input_value(self.state, feature, value))

    def dismiss_notification(self) -> None:
        self.channel.dismiss()
