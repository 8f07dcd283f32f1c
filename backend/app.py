"""
SafeScan FastAPI application.

Endpoints:
    GET    /                        Health check
    POST   /scan                    normalize -> cache -> evaluate -> override -> persist
    GET    /scan/history            Paginated scan history (newest first)
    GET    /scan/saved              Saved scans (newest first)
    PATCH  /scan/{scan_id}/save     Toggle saved flag
    DELETE /scan/{scan_id}          Delete an owned scan
    GET    /profile/{user_id}       Get user profile
    POST   /profile                 Create or update profile
"""
from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, List, Optional
import logging
from dotenv import load_dotenv
from pathlib import Path

# Load env vars
load_dotenv(Path(__file__).parent / ".env")

from core.config import log_config, EVALUATION_STRATEGY
from core.errors import AnalysisFailedError, NotFoundError, ScanError, ScanValidationError
from core.evaluation import build_evaluator
from core.external_apis.ollama import OllamaGenerator
from core.ontology.ingredient_registry import IngredientRegistry
from core.profile_storage import ProfileStore
from core.scan_pipeline import ScanService
from core.scan_storage import ScanStore

# Logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# --- Request Models ---
class ScanRequest(BaseModel):
    user_id: str
    # Validated by the pipeline so a non-list is a 400, not a schema error
    ingredients: Optional[Any] = None


class ProfileBody(BaseModel):
    user_id: str
    email: Optional[str] = None
    diet: Optional[str] = None
    allergies: Optional[List[str]] = None
    avoid: Optional[List[str]] = None
    health_issues: Optional[List[str]] = None
    likes: Optional[List[str]] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    profile_completed: Optional[bool] = None


def _http_error(e: ScanError) -> HTTPException:
    if isinstance(e, ScanValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, AnalysisFailedError):
        return HTTPException(status_code=502, detail=f"Analysis failed: {e}")
    return HTTPException(status_code=500, detail=str(e))


def create_app(
    scan_service: Optional[ScanService] = None,
    profile_store: Optional[ProfileStore] = None,
) -> FastAPI:
    """Build the app. Collaborators are created here unless injected (tests)."""
    app = FastAPI(title="SafeScan Ingredient Safety API")
    log_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    profiles = profile_store or ProfileStore()
    if scan_service is None:
        generator = OllamaGenerator() if EVALUATION_STRATEGY == "generative" else None
        evaluator = build_evaluator(
            EVALUATION_STRATEGY,
            generator=generator,
            ingredient_registry=IngredientRegistry() if EVALUATION_STRATEGY == "rule_based" else None,
        )
        scan_service = ScanService(profiles, ScanStore(), evaluator)
    service = scan_service

    # --- Endpoints ---

    @app.get("/")
    def health_check():
        return {"status": "ok", "service": "SafeScan", "strategy": EVALUATION_STRATEGY}

    @app.post("/scan")
    async def scan_ingredients(request: ScanRequest):
        """Evaluate an ingredient list for the user. Blocking work runs in a worker thread."""
        logger.info("Scan request user_id=%s", request.user_id)
        try:
            return await run_in_threadpool(service.scan, request.user_id, request.ingredients)
        except ScanError as e:
            logger.warning("Scan failed user_id=%s error=%s: %s", request.user_id, type(e).__name__, e)
            raise _http_error(e)
        except Exception as e:
            logger.error("Scan failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/scan/history")
    async def scan_history(user_id: str, page: Optional[str] = None, limit: Optional[str] = None):
        # Raw strings: the service validates and reports bad values as 400
        try:
            return await run_in_threadpool(service.history, user_id, page, limit)
        except ScanError as e:
            raise _http_error(e)
        except Exception as e:
            logger.error("History failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/scan/saved")
    async def saved_scans(user_id: str):
        try:
            return {"scans": await run_in_threadpool(service.saved, user_id)}
        except ScanError as e:
            raise _http_error(e)
        except Exception as e:
            logger.error("Saved list failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.patch("/scan/{scan_id}/save")
    async def toggle_save(scan_id: str, user_id: str):
        try:
            return await run_in_threadpool(service.toggle_saved, user_id, scan_id)
        except ScanError as e:
            raise _http_error(e)
        except Exception as e:
            logger.error("Save toggle failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.delete("/scan/{scan_id}")
    async def delete_scan(scan_id: str, user_id: str):
        try:
            await run_in_threadpool(service.delete, user_id, scan_id)
            return {"status": "ok", "scanId": scan_id}
        except ScanError as e:
            raise _http_error(e)
        except Exception as e:
            logger.error("Delete failed: %s", e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/profile/{user_id}")
    async def get_profile(user_id: str):
        """Get persisted profile by user_id."""
        profile = profiles.get_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail=f"User not found: {user_id}")
        return profile.to_dict()

    @app.post("/profile")
    async def create_or_update_profile(body: ProfileBody):
        """Create or update profile. Merge: only provided fields are updated."""
        try:
            fields = body.model_dump(exclude={"user_id"})
            profile = profiles.update_profile_partial(body.user_id, **fields)
            logger.info("PROFILE_UPDATE user_id=%s diet=%s", body.user_id, profile.diet)
            return {"status": "ok", "profile": profile.to_dict()}
        except Exception as e:
            logger.error("Profile save failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
