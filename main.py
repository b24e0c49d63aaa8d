"""Main application entry point for the WhatsApp gateway."""

from app.config import create_app
from app.routes import messaging, system

# Create the FastAPI application
app = create_app()

# Include all route modules
app.include_router(messaging.router, tags=["Messaging"])
app.include_router(system.router, tags=["System"])

if __name__ == "__main__":
    import uvicorn
    import logging

    settings = app.state.settings
    logger = logging.getLogger(__name__)

    # uvicorn handles SIGINT/SIGTERM: the lifespan shutdown tears the
    # connection down and the process exits with status 0.
    logger.info("Starting application with uvicorn...")
    uvicorn.run(app, host=settings.host, port=settings.port)
