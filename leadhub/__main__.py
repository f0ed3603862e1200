import uvicorn

from leadhub.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "leadhub.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        reload=settings.app_debug and settings.app_env == "local",
        log_config=None,
    )


if __name__ == "__main__":
    main()
