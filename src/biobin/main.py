from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.health import router as health_router
from .api.routes import router as views_router
from .api.ws import router as ws_router
from .core.config import config_path_from_env
from .core.view_manager import manager
from .logging_config import configure_logging

configure_logging()

app = FastAPI(title="BioBin Viewer",
              description="Live status, history tables and charts for BioBin composter sensors",
              version="0.4.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(views_router)
app.include_router(ws_router)

@app.on_event("startup")
async def startup_event():
    manager.load_from_config(config_path_from_env())
    manager.start_all()

@app.on_event("shutdown")
async def shutdown_event():
    manager.close_all()

# Run: uvicorn biobin.main:app --host 0.0.0.0 --port 8080
