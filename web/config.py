import os
import tempfile


class Config:
    PORT = int(os.getenv("PORT", 5000))
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    UPLOAD_DIR = os.getenv(
        "LABELS_UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "label_sheets_web")
    )
    LOG_LEVEL = os.getenv("LABELS_LOG_LEVEL", "INFO")
    PREVIEW_DPI = int(os.getenv("LABELS_PREVIEW_DPI", 72))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 50 * 1024 * 1024))
    # Origins allowed to send non-GET requests
    ALLOWED_HOSTS = {"localhost", "127.0.0.1"}
