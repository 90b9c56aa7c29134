import os
import logging
from dotenv import load_dotenv

load_dotenv()

# --- Logging Setup ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Remote Service ---
API_URL = os.getenv("ML_API_URL", "http://127.0.0.1:8000").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("ML_API_TIMEOUT", "60"))

# --- Notifications ---
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "5"))

# --- Training Options ---
MODEL_CHOICES = [
    "Logistic Regression",
    "Random Forest",
    "Decision Tree",
    "KNN",
    "Linear Regression",
]

CSV_CONTENT_TYPE = "text/csv"
MANUAL_INPUT_FILENAME = "manual_prediction_input.csv"
