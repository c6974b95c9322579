import logging
import os

import uvicorn

from sitegen.main import app

log = logging.getLogger(__name__)


def main() -> None:
    try:
        port = int(os.getenv("PORT", "5000"))
    except ValueError:
        port = 5000
    host = os.getenv("HOST", "0.0.0.0")
    log.info("Server running on port %d", port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
