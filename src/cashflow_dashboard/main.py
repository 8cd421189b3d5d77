import uvicorn

from cashflow_dashboard.app import app
from cashflow_dashboard.core import settings
from cashflow_dashboard.logger import get_logging_config


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=get_logging_config())


if __name__ == "__main__":
    run()
