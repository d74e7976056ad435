"""Bootstrap: load ``.env``, configure logging, and serve the session API.

Usage::

    python run.py
"""

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from src.api.app import create_app
from src.config import get_settings
from src.utils.logging_config import setup_logging

_settings = get_settings()
setup_logging(level=_settings.log_level, environment=_settings.app_env.value)

app = create_app(_settings)

if __name__ == "__main__":
    uvicorn.run(app, host=_settings.host, port=_settings.port, log_config=None)
