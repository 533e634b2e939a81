"""SocialSphere entrypoint.

Run with:
  python -m socialsphere
"""

import logging

import uvicorn

from socialsphere.config import load_settings


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "socialsphere.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )

if __name__ == "__main__":
    main()
