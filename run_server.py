import uvicorn
import logging

from blockql.config import load_config

# Only show ERROR and CRITICAL from uvicorn; the application logs requests itself
uvicorn_loggers = [
    logging.getLogger("uvicorn"),
    logging.getLogger("uvicorn.error"),
    logging.getLogger("uvicorn.access"),
    logging.getLogger("uvicorn.asgi"),
]

for uvicorn_logger in uvicorn_loggers:
    uvicorn_logger.setLevel(logging.ERROR)
    # Remove handlers to prevent duplicate output
    uvicorn_logger.handlers = []


def bind_address(config=None):
    """Listen address from [rpc.http], the same one `blockql serve` uses."""
    config = config or load_config()
    return config.rpc.http.host, config.rpc.http.port


if __name__ == "__main__":
    host, port = bind_address()
    uvicorn.run(
        "blockql.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
        access_log=False,
        log_config=None
    )
