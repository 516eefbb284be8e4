"""
MedSim Guard Main Application Entry Point
- Launches the API server.
"""

import uvicorn

from medsim.config import settings

if __name__ == "__main__":
    print("🚀 Starting MedSim Guard")
    print(f"📍 Server will run at http://{settings.HOST}:{settings.PORT}")
    print(f"📋 Application log level: {settings.LOG_LEVEL.upper()}")

    # Note: Application logging is configured in medsim.main when the module loads
    # The log_level parameter here only controls uvicorn's own logging
    uvicorn.run(
        "medsim.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",  # Controls uvicorn logs only
    )
