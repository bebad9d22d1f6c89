"""
ASGI entry point for the wake API.

Used by uvicorn / gunicorn:
    uvicorn server.asgi:app
"""

from dotenv import load_dotenv

load_dotenv()

from server.app import create_app  # pylint: disable=wrong-import-position

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "server.asgi:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
