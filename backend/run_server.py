"""Start the API with uvicorn on the configured host and port."""
import uvicorn

from upskilling.config import settings
from upskilling.main import app


def run():
    """Serve the application until interrupted.

    `HOST` and `PORT` come from the environment (default 0.0.0.0:8080).
    """
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == '__main__':
    run()
