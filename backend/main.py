from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi import Request
from mangum import Mangum
from config import ADMIN_EMAIL, ADMIN_PASSWORD, ENVIRONMENT, get_session_factory, init_db
from utils.exceptions import MarketplaceError, marketplace_error_handler
import logging

from routers.auth.auth import router as auth_router
from routers.auth.helpers import auth_helpers
from routers.listings.listings import router as listings_router
from routers.bids.bids import router as bids_router
from routers.ai.ai import router as ai_router
from routers.notifications.notifications import router as notifications_router
from routers.kyc.kyc import router as kyc_router
from routers.saved_listings.saved_listings import router as saved_listings_router
from routers.reports.reports import router as reports_router
from routers.admin.admin import router as admin_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

IS_PRODUCTION = ENVIRONMENT == "prod"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    async with get_session_factory()() as db:
        await auth_helpers.ensure_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD)
    logger.info(f"WasteMarket API started ({ENVIRONMENT})")
    yield


app = FastAPI(
    title="WasteMarket API",
    description="Marketplace API where sellers list recyclable waste materials and buyers purchase or bid on them.",
    version="1.0.0",
    root_path="/Prod" if IS_PRODUCTION else "",
    docs_url="/apidocs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MarketplaceError, marketplace_error_handler)

app.include_router(auth_router)
app.include_router(listings_router)
app.include_router(bids_router)
app.include_router(ai_router)
app.include_router(notifications_router)
app.include_router(kyc_router)
app.include_router(saved_listings_router)
app.include_router(reports_router)
app.include_router(admin_router)


@app.get("/docs", include_in_schema=False)
async def api_documentation(request: Request):
    openapi_url = "/Prod/openapi.json" if IS_PRODUCTION else "/openapi.json"

    return HTMLResponse(
        f"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>WasteMarket API DOCS</title>
    <script src="https://unpkg.com/@stoplight/elements/web-components.min.js"></script>
    <link rel="stylesheet" href="https://unpkg.com/@stoplight/elements/styles.min.css">
  </head>
  <body>
    <elements-api apiDescriptionUrl="{openapi_url}" router="hash" theme="dark" />
  </body>
</html>"""
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


handler = Mangum(app)
