import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core.config import quiz_settings
from src.core.logging_config import setup_logging
from src.routers import quiz as quiz_router

# Configure logging VERY early
setup_logging(quiz_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Quiz Scoring Engine - Main API")

# The rendering layer is served separately, so allow cross-origin calls
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---
app.include_router(quiz_router.router, prefix=quiz_settings.api_prefix, tags=["quiz"])


@app.get("/health", tags=["Health Check"])
async def health_check():
    """
    Basic liveness check. Also reports how many quiz definitions loaded.
    """
    catalog = quiz_router.get_quiz_catalog()
    logger.debug(f"Health check: {len(catalog)} quizzes available")
    return {"status": "ok", "quizzes": catalog.ids()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
