"""
Sentient Dashboard - Web Server Entry Point
===========================================

Run this to start the web dashboard:
    python main.py

Then open http://127.0.0.1:8000 in your browser.

Set GEMINI_API_KEY (or API_KEY) in the environment or a .env file first.
"""

import logging

import uvicorn

from sentient.infrastructure.config import get_settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    """Start the web server."""
    settings = get_settings()

    for issue in settings.validate():
        logger.warning(issue)

    print("\n" + "=" * 50)
    print("   Sentient - Review Analysis Dashboard")
    print("=" * 50)
    print(f"\n   Starting server at http://{settings.server.host}:{settings.server.port}")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "sentient.web.app:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        log_level=settings.server.log_level,
    )


if __name__ == "__main__":
    main()
