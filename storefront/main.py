"""
storefront/main.py

Purpose: Application entry point

- Builds the FastAPI app (middleware, error handlers, routers)
- Startup: settings check, MongoDB, indexes, seed data
- Shutdown: closes the MongoDB client
- No business logic should be written here
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import (
    addresses,
    analytics,
    auth,
    cart,
    categories,
    contact,
    coupons,
    debug,
    health,
    offers,
    orders,
    payments,
    products,
    reviews,
    shipping,
    testimonials,
    wishlist,
)
from storefront.core.config import settings, validate_settings
from storefront.core.errors import add_exception_handlers
from storefront.core.logging import setup_logging, get_logger
from storefront.db.indexes import create_indexes
from storefront.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from storefront.db.seed import seed_initial_data

setup_logging()
logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 5.0

# (router, path under API_PREFIX, tag)
API_ROUTERS = (
    (auth.router, "/user", "Auth"),
    (products.router, "/products", "Products"),
    (categories.router, "/categories", "Categories"),
    (cart.router, "/cart", "Cart"),
    (wishlist.router, "/wishlist", "Wishlist"),
    (addresses.router, "/addresses", "Addresses"),
    (orders.router, "/orders", "Orders"),
    (payments.router, "/payments", "Payments"),
    (coupons.router, "/coupons", "Coupons"),
    (reviews.router, "/reviews", "Reviews"),
    (offers.router, "/offers", "Offers"),
    (testimonials.router, "/testimonials", "Testimonials"),
    (shipping.router, "/shipping", "Shipping"),
    (analytics.router, "/analytics", "Analytics"),
    (contact.router, "/contact", "Contact"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting storefront API...")

    try:
        validate_settings()
        await connect_to_mongo()
        await create_indexes()
        await seed_initial_data()

        if not await check_database_health():
            logger.warning("⚠️ Database health check failed during startup")

        logger.info(f"🎉 Storefront API ready ({settings.ENVIRONMENT})")
        logger.info(
            f"Integrations: razorpay={settings.razorpay_configured} "
            f"email={settings.email_configured} cloudinary={settings.cloudinary_configured} "
            f"google={settings.google_oauth_configured}"
        )
    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield

    logger.info("🛑 Shutting down storefront API...")
    await close_mongo_connection()


app = FastAPI(
    title=health.APP_NAME,
    description="Catalog, cart, checkout, orders and store administration",
    version=health.APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type", "Idempotency-Key"],
    expose_headers=["X-Cache", "X-Process-Time"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"

    if process_time > SLOW_REQUEST_SECONDS:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path, "process_time": process_time}
        )

    return response


add_exception_handlers(app)

app.include_router(health.router, tags=["Health"])

for router, path, tag in API_ROUTERS:
    app.include_router(router, prefix=f"{settings.API_PREFIX}{path}", tags=[tag])

# Same account routes under /api/auth (OAuth redirect URI)
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"], include_in_schema=False)

if not settings.is_production:
    app.include_router(debug.router, prefix=f"{settings.API_PREFIX}/debug", tags=["Debug"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
