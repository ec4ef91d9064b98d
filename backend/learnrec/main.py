import logging
from typing import Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .dependencies import get_recommendation_engine
from .logging_config import configure_logging
from .recommendation_routes import router as recommendation_router
from .recommendations import RecommendationEngine


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Course Recommendation Service", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(recommendation_router)


@app.get("/healthz")
def health(
    settings: Settings = Depends(get_settings),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> Dict[str, str]:
    cache = engine.cache
    return {
        "status": "ok",
        "data_backend": settings.data_backend,
        "cache": type(cache).__name__ if cache is not None else "disabled",
    }
