"""
FastAPI Application Entry Point

Kitchen Order Queue - live queue board for the kitchen / front-of-house
screen, with automatic ready -> delivered advancement.

Endpoints:
    - GET /api/queue: Queue board rows (JSON)
    - GET /queue: Queue board page
    - POST /api/queue/advance: Run one auto-advance pass now
    - GET /api/orders: List orders
    - GET /api/orders/{id}: Single order
    - POST /api/orders: Create order (development)
    - PATCH /api/orders/{id}/kitchen-status: Kitchen staff update
    - GET /health: System health check
"""

import asyncio
import sys
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse, HTMLResponse
from fastapi.templating import Jinja2Templates
from fastapi.middleware.cors import CORSMiddleware
import redis.asyncio as redis

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from kitchen_queue.core.config import Settings, get_settings, setup_logging
from kitchen_queue.core.timeutils import coerce_timestamp
from kitchen_queue.models import KitchenStatus, OrderStatus
from kitchen_queue.schemas import (
    AdvanceReportResponse,
    ErrorResponse,
    HealthResponse,
    KitchenStatusUpdate,
    KitchenStatusUpdateResponse,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    QueueResponse,
)
from kitchen_queue.services.clock import BaseClock, get_clock
from kitchen_queue.services.order_store import (
    BaseOrderStore,
    OrderSnapshot,
    SqlOrderStore,
    get_order_store,
)
from kitchen_queue.services.queue.display import QueueDisplay

logger = logging.getLogger(__name__)

# Template configuration
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def seed_demo_orders(store: BaseOrderStore, clock: BaseClock) -> None:
    """Create one order per kitchen status so the board has something to show."""
    now = clock.now()
    await store.create_order(kitchen_status=KitchenStatus.NEW)
    await store.create_order(
        kitchen_status=KitchenStatus.IN_PROGRESS,
        estimated_completion_time=now + timedelta(minutes=7),
    )
    await store.create_order(kitchen_status=KitchenStatus.IN_PROGRESS)
    await store.create_order(kitchen_status=KitchenStatus.READY)
    logger.info("Demo orders created")


def order_response(order: OrderSnapshot) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        kitchen_status=order.kitchen_status.value,
        estimated_completion_time=order.estimated_completion_time,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def get_display(request: Request) -> QueueDisplay:
    return request.app.state.queue_display


def get_store(request: Request) -> BaseOrderStore:
    return request.app.state.queue_display.store


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    store: Optional[BaseOrderStore] = None,
    clock: Optional[BaseClock] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the API application.

    Collaborators default to the configured factories; tests inject an
    in-memory store, a FixedClock and their own Settings.
    """
    settings = settings or get_settings()
    clock = clock or get_clock()
    store = store or get_order_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Order Store: {store.provider_name}")
        logger.info(f"   Clock: {clock.provider_name}")
        logger.info("=" * 60)

        if isinstance(store, SqlOrderStore):
            from kitchen_queue.database import init_db

            await init_db()
            logger.info("Database initialized")

        if settings.seed_demo_orders and settings.is_development:
            await seed_demo_orders(store, clock)

        display = QueueDisplay(store, clock, settings=settings)
        app.state.queue_display = display
        display.start()
        if display.auto_advance_task is None:
            logger.info("In-process auto-advance disabled; expecting the Celery beat worker")

        logger.info("Application ready!")

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await display.stop()
        if isinstance(store, SqlOrderStore):
            from kitchen_queue.database import engine

            await engine.dispose()
        logger.info("Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Live kitchen order queue with wait estimates and automatic "
            "ready-to-delivered advancement."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.clock = clock

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ROOT & HEALTH ENDPOINTS
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "queue": "/queue",
            "health": "/health",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(
        display: QueueDisplay = Depends(get_display),
    ) -> HealthResponse:
        """Verify all system components are operational."""
        store_status = "healthy" if await display.store.health_check() else "unhealthy"

        # Redis only matters when the Celery worker runs the scan
        redis_status = "not used"
        if display.auto_advance_task is None:
            redis_status = "healthy"
            try:
                r = redis.Redis.from_url(settings.redis_url, socket_timeout=2)
                await r.ping()
                await r.aclose()
            except Exception as e:
                redis_status = f"unhealthy: {str(e)}"
                logger.error(f"Redis health check failed: {e}")

        scheduler_status = "external"
        if display.auto_advance_task is not None:
            scheduler_status = "running" if display.auto_advance_task.is_running else "stopped"

        overall = "operational" if store_status == "healthy" and not redis_status.startswith(
            "unhealthy"
        ) else "degraded"

        return HealthResponse(
            status=overall,
            order_store=store_status,
            redis=redis_status,
            scheduler=scheduler_status,
            timestamp=clock.now(),
        )

    # =========================================================================
    # QUEUE ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/queue",
        response_model=QueueResponse,
        tags=["Queue"],
        summary="Queue Board",
    )
    async def queue_board(
        lang: Optional[str] = Query(None, max_length=10),
        display: QueueDisplay = Depends(get_display),
    ) -> QueueResponse:
        """Today's undelivered orders with status and wait estimate."""
        language = display.localizer.resolve_language(lang)
        rows = await display.rows(language)
        return QueueResponse(
            current_time=display.display_clock.current_time,
            language=language,
            rtl=display.localizer.is_rtl(language),
            labels=display.localizer.labels(language),
            rows=[row.to_dict() for row in rows],
        )

    @app.get(
        "/queue",
        response_class=HTMLResponse,
        tags=["Queue"],
    )
    async def queue_page(
        request: Request,
        lang: Optional[str] = Query(None, max_length=10),
        display: QueueDisplay = Depends(get_display),
    ) -> HTMLResponse:
        """Serve the queue board page."""
        language = display.localizer.resolve_language(lang)
        rows = await display.rows(language)
        return templates.TemplateResponse(
            request,
            "queue.html",
            {
                "rows": rows,
                "labels": display.localizer.labels(language),
                "language": language,
                "rtl": display.localizer.is_rtl(language),
                "current_time": display.display_clock.current_time,
                "tz": settings.display_tz,
                "refresh_seconds": int(settings.auto_advance_interval_seconds),
            },
        )

    @app.post(
        "/api/queue/advance",
        response_model=AdvanceReportResponse,
        tags=["Queue"],
        summary="Run Auto-Advance Now",
    )
    async def advance_queue(
        display: QueueDisplay = Depends(get_display),
    ) -> AdvanceReportResponse:
        """Run one auto-advance pass immediately."""
        report = await display.advance_now()
        return AdvanceReportResponse(**report.to_dict())

    # =========================================================================
    # ORDER API ENDPOINTS
    # =========================================================================

    @app.get(
        "/api/orders",
        response_model=OrderListResponse,
        tags=["Orders"],
        summary="List Orders",
    )
    async def list_orders(
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=500),
        kitchen_status: Optional[str] = Query(None),
        store: BaseOrderStore = Depends(get_store),
    ) -> OrderListResponse:
        """Retrieve paginated list of orders, most recent first."""
        orders = await store.list_orders()

        if kitchen_status:
            try:
                status_enum = KitchenStatus(kitchen_status.lower())
            except ValueError:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid kitchen_status. Options: {[s.value for s in KitchenStatus]}"
                )
            orders = [o for o in orders if o.kitchen_status == status_enum]

        oldest = datetime.min.replace(tzinfo=timezone.utc)
        orders.sort(
            key=lambda o: (coerce_timestamp(o.created_at) or oldest, o.order_number),
            reverse=True,
        )
        return OrderListResponse(
            total=len(orders),
            orders=[order_response(o) for o in orders[skip:skip + limit]],
        )

    @app.get(
        "/api/orders/{order_id}",
        response_model=OrderResponse,
        tags=["Orders"],
    )
    async def get_order(
        order_id: int,
        store: BaseOrderStore = Depends(get_store),
    ) -> OrderResponse:
        """Get a specific order by ID."""
        order = await store.get_order(order_id)
        if not order:
            raise HTTPException(status_code=404, detail=f"Order #{order_id} not found")
        return order_response(order)

    @app.post(
        "/api/orders",
        response_model=OrderResponse,
        status_code=201,
        responses={403: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Create Order (Development)",
    )
    async def create_order(
        order_data: OrderCreate,
        store: BaseOrderStore = Depends(get_store),
    ) -> OrderResponse:
        """
        Create an order directly.

        Orders normally come from the ordering workflow; this endpoint
        exists for local testing and the simulation script.
        """
        if not settings.is_development:
            raise HTTPException(
                status_code=403,
                detail="Order creation endpoint only available in development mode"
            )
        order = await store.create_order(
            order_number=order_data.order_number,
            status=OrderStatus(order_data.status.value),
            kitchen_status=KitchenStatus(order_data.kitchen_status.value),
            estimated_completion_time=order_data.estimated_completion_time,
        )
        return order_response(order)

    @app.patch(
        "/api/orders/{order_id}/kitchen-status",
        response_model=KitchenStatusUpdateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Orders"],
        summary="Kitchen Staff Update",
    )
    async def update_kitchen_status(
        order_id: int,
        payload: KitchenStatusUpdate,
        store: BaseOrderStore = Depends(get_store),
    ) -> KitchenStatusUpdateResponse:
        """
        Move an order forward and/or set its estimated completion time.

        Repeating an update, or updating an order that is already
        delivered, succeeds with ``changed=false``. Moving a live order
        backwards is rejected with 409.
        """
        if payload.kitchen_status is None and not payload.has_estimate_change():
            raise HTTPException(status_code=400, detail="Nothing to update")

        current = await store.get_order(order_id)
        if current is None:
            raise HTTPException(status_code=404, detail=f"Order #{order_id} not found")

        target = KitchenStatus(payload.kitchen_status.value) if payload.kitchen_status else None
        if (
            target is not None
            and not current.kitchen_status.is_terminal
            and target.rank < current.kitchen_status.rank
        ):
            raise HTTPException(
                status_code=409,
                detail=(
                    f"Order #{current.order_number} is {current.kitchen_status.value}; "
                    f"cannot move back to {target.value}"
                ),
            )

        changed = False
        order = current
        # Delivered orders are frozen; estimate changes are ignored like status repeats
        if payload.has_estimate_change() and not current.kitchen_status.is_terminal:
            if payload.clear_estimate:
                estimate: Optional[datetime] = None
            elif payload.estimated_minutes is not None:
                estimate = clock.now() + timedelta(minutes=payload.estimated_minutes)
            else:
                estimate = payload.estimated_completion_time
            result = await store.update_estimate(order_id, estimate)
            if result.not_found:
                raise HTTPException(status_code=404, detail=f"Order #{order_id} not found")
            changed = changed or result.changed
            order = result.order

        if target is not None:
            result = await store.update_kitchen_status(order_id, target)
            if result.not_found:
                raise HTTPException(status_code=404, detail=f"Order #{order_id} not found")
            changed = changed or result.changed
            order = result.order

        return KitchenStatusUpdateResponse(
            success=True,
            changed=changed,
            previous_status=current.kitchen_status.value,
            order=order_response(order),
        )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal Server Error",
                "detail": str(exc) if settings.debug else "An unexpected error occurred",
            },
        )

    return app


def build_default_app() -> FastAPI:
    """Configure logging and build the app from environment settings."""
    setup_logging()
    return create_app()


app = build_default_app()
