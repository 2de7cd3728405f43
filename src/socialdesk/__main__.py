"""Run the HTTP service: python -m socialdesk."""

import os

import uvicorn

from socialdesk.observability.logging import get_logger

logger = get_logger(__name__)


def main() -> None:
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    logger.info(
        "starting socialdesk",
        extra={"extra_fields": {"host": host, "port": port}},
    )
    uvicorn.run("socialdesk.api.app:app", host=host, port=port)


if __name__ == "__main__":
    main()
