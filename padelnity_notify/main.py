import uvicorn

from padelnity_notify.config import settings
from padelnity_notify.presentation.app_factory import create_app


app = create_app()


def run() -> None:
    uvicorn.run(
        "padelnity_notify.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
