"""Main entry point for the RepoLens server."""

import uvicorn

from repolens.server.config import get_settings


def run():
    """Run the analysis server."""
    settings = get_settings()

    uvicorn.run(
        "repolens.server.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
