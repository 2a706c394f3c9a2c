"""
Main entry point for Ritual Weave.
"""

from .api import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    from .config import get_settings

    settings = get_settings()
    uvicorn.run(
        "ritual_weave.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
