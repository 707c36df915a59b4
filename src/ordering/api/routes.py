"""FastAPI routes for the Ordering domain — checkout and order administration.

Bodies are read raw so that admission control runs before validation: a
flood of malformed requests still consumes the caller's budget.
"""

import secrets

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from shared import settings
from shared.errors import InvalidPayload, Unauthorized

from ordering.api.schemas import ChangeStatusRequest
from ordering.order.intake import OrderIntake
from ordering.order.status import get_order, list_orders, update_order_status
from ordering.ratelimit import client_identifier


async def _json_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


def require_admin(request: Request) -> None:
    """Accept only ``Authorization: Bearer <ADMIN_API_TOKEN>``."""
    expected = settings.admin_api_token()
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if not expected or scheme.lower() != "bearer" or not secrets.compare_digest(token.strip(), expected):
        raise Unauthorized()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/commandes", tags=["commandes"])


@order_router.post("", status_code=201)
async def place_order(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    payload = await _json_body(request)
    order = OrderIntake().place(
        payload,
        client_id=client_identifier(request),
        schedule=background_tasks.add_task,
    )
    return JSONResponse(status_code=201, content={"success": True, "data": order})


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(
    prefix="/api/admin/commandes",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _bounded_int(raw: str | None, default: int, minimum: int, maximum: int | None = None) -> int:
    """Lenient query-string integer: anything unusable falls back to ``default``."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    return min(value, maximum) if maximum is not None else value


@admin_order_router.get("")
async def list_recent_orders(
    statut: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
) -> JSONResponse:
    orders, count = list_orders(
        status=statut.strip() if statut else None,
        limit=_bounded_int(limit, default=50, minimum=1, maximum=100),
        offset=_bounded_int(offset, default=0, minimum=0),
    )
    return JSONResponse(content={"success": True, "data": orders, "count": count})


@admin_order_router.get("/{order_id}")
async def read_order(order_id: str) -> JSONResponse:
    return JSONResponse(content={"success": True, "data": get_order(order_id)})


@admin_order_router.patch("/{order_id}")
async def change_order_status(order_id: str, request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    payload = await _json_body(request)
    try:
        body = ChangeStatusRequest.model_validate(payload)
    except PydanticValidationError as exc:
        details = [{"champ": ".".join(str(p) for p in e["loc"]), "message": e["msg"]} for e in exc.errors()]
        raise InvalidPayload("Statut invalide", details=details) from None

    order = update_order_status(order_id, body.nouveau_statut, schedule=background_tasks.add_task)
    return JSONResponse(content={"success": True, "data": order})
