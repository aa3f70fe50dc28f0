import os
import threading
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import get_database, prepare_database
from pipeline import STATUS_FOR_KIND, ErrorKind
from routes import register_routes

logger = structlog.get_logger(__name__)

PORT = int(os.getenv("PORT", 8000))

TAGS = [
    {"name": "Users", "description": "get, create, update and delete users"},
    {"name": "Products", "description": "get, create, update and delete products"},
    {"name": "Orders", "description": "get, create, update and delete orders, track shipments"},
    {"name": "Domain", "description": "check and register domain names (mock)"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs beside the server; an unreachable database is only logged.
    app.state.startup_check = threading.Thread(
        target=prepare_database, args=(app.state.db,), name="database-startup-check", daemon=True
    )
    app.state.startup_check.start()
    yield


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg")})
    return JSONResponse(status_code=STATUS_FOR_KIND[ErrorKind.VALIDATION], content={"errors": errors})


def create_app(database: Optional[Database] = None) -> FastAPI:
    app = FastAPI(
        title="Shop API",
        version="1.0.0",
        description="Users, products and orders over MongoDB, plus mock domain and shipment endpoints",
        openapi_tags=TAGS,
        docs_url="/api-docs",
        lifespan=lifespan,
    )
    app.state.db = database if database is not None else get_database()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # ----------------------- Health -----------------------
    @app.get("/", include_in_schema=False)
    def root():
        return {"message": "Shop API running", "docs": "/api-docs"}

    @app.get("/test", include_in_schema=False)
    def test_database(request: Request):
        db = request.app.state.db
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_url": "Set" if os.getenv("DATABASE_URL") or os.getenv("MONGOURI") else "Not Set",
            "database_name": db.name,
            "connection_status": "Not Connected",
            "collections": [],
        }
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "Connected & Working"
            response["connection_status"] = "Connected"
        except PyMongoError as e:
            logger.warning("Database status check failed", database=db.name, error=str(e))
            response["database"] = "Error"
        return response

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting server", url=f"http://localhost:{PORT}", docs=f"http://localhost:{PORT}/api-docs")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
