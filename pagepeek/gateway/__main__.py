import uvicorn

from pagepeek.gateway import create_app
from pagepeek.gateway.config import Settings
from pagepeek.gateway.logging_config import configure_logging


def main() -> None:
    settings = Settings()  # type: ignore
    configure_logging(settings.log_dir, level="DEBUG" if settings.is_development else "INFO")
    # log_config=None keeps uvicorn's loggers routed through the loguru intercept
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
