"""Run the session board server with uvicorn."""

import uvicorn

from setlist_board.config import Settings


def main() -> None:
    """Start the ASGI server on the configured host and port."""
    settings = Settings()
    uvicorn.run("setlist_board.api.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
