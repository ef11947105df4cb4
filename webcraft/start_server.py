"""
Start FastAPI Server
Quick launcher for the website builder server
"""

import argparse

import uvicorn

from webcraft.config.settings import get_settings
from webcraft.tools.utils import Logger, mask_secret


def main():
    parser = argparse.ArgumentParser(description='Webcraft - conversational website builder server')
    parser.add_argument('--host', default='0.0.0.0', help='Interface to bind (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000, help='Port to listen on (default: 8000)')
    args = parser.parse_args()

    settings = get_settings()

    Logger.banner("Starting Webcraft Website Builder Server")
    Logger.info(f"Mode: {settings.app_mode}")
    Logger.info(f"API key: {mask_secret(settings.openai_api_key)}")
    if not settings.is_configured:
        Logger.warning("OPENAI_API_KEY is not set - generation will be blocked until it is configured")
    if settings.database_url:
        Logger.info("Transcript archive: enabled")
    Logger.info(f"Builder page:  http://localhost:{args.port}/")
    Logger.info(f"Swagger UI:    http://localhost:{args.port}/docs")
    Logger.info("Press CTRL+C to stop the server")

    uvicorn.run(
        "webcraft.server.main:app",
        host=args.host,
        port=args.port,
        reload=settings.is_development,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
