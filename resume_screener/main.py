from fastapi import FastAPI
from contextlib import asynccontextmanager
from resume_screener.core.config import settings
from resume_screener.core.logger import app_logger
from resume_screener.api.routes import router as api_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info(f"Service is starting up (model: {settings.LLM_MODEL_ID}, batch size: {settings.BATCH_SIZE})...")
    yield
    app_logger.info("Service is shutting down...")

app = FastAPI(
    title=settings.PROJECT_NAME,
    lifespan=lifespan
)

app.include_router(api_router, prefix=settings.API_V1_STR)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("resume_screener.main:app", host="0.0.0.0", port=8000, reload=True)
