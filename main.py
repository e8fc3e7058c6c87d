from fastapi import FastAPI, Depends, Response
from fastapi.middleware.cors import CORSMiddleware
from filegate.api.routes import router as api_router
from filegate.core.config import settings
from filegate.core.database import db
from filegate.core.errors import register_exception_handlers
from filegate.core.logging import configure_logging
from filegate.services.storage import StorageService, get_storage

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Scholarship File Access Gateway")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

register_exception_handlers(app)


@app.on_event("startup")
async def on_startup():
    db.connect()


@app.on_event("shutdown")
async def on_shutdown():
    db.close()


app.include_router(api_router, tags=["Files"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/health/storage")
async def storage_health_check(storage: StorageService = Depends(get_storage)):
    await storage.check_connection()
    return {"status": "ok", "bucket": storage.bucket_name}


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)
