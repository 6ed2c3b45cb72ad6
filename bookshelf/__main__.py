"""Run the Bookshelf API with uvicorn: `python -m bookshelf`."""

import uvicorn

from bookshelf.config import settings


def main() -> None:
    uvicorn.run(
        "bookshelf.main:app",
        host=settings.host,
        port=settings.port,
        # bookshelf.access logs every request
        access_log=False,
    )


if __name__ == "__main__":
    main()
