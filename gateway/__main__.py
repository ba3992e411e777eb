import uvicorn

from gateway.config.settings import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("gateway.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
