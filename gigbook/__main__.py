"""Run the API with uvicorn on the configured port."""
import uvicorn

from gigbook.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("gigbook.app:create_app", factory=True, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
