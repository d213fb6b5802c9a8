from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from dotenv import load_dotenv
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repo import get_repository
from .db.store import StateContainer
from .models.dashboard import ConversionForm
from .models.portfolio import House, LentItem, Lead, Payment, Record, Showing, Tenant
from .services import portfolio
from .services.collection import summarize_month, tenant_month_status, vacant_rooms
from .services.conversion import convert_lead, room_options, start_conversion
from .services.errors import ConfirmationRequired, StateValidationError
from .services.fees import fee_status, fee_statuses
from .services.ledger import ledger_years, receipt_text, tenant_year_ledger
from .services.timeline import project_timeline
from .utils.dates import month_key
from .utils.logging import get_logger

LOGGER = get_logger("api")

MONTH_PATTERN = r"^\d{4}-\d{2}$"

app = FastAPI(title="PropTrack")
router = APIRouter(prefix="/api")

_container: Optional[StateContainer] = None


def get_container() -> StateContainer:
    global _container
    if _container is None:
        _container = get_repository().open_container()
    return _container


def _run(container: StateContainer, mutation, *args, **kwargs):
    try:
        return container.apply(mutation, *args, **kwargs)
    except ConfirmationRequired as exc:
        raise HTTPException(409, detail=str(exc))
    except StateValidationError as exc:
        raise HTTPException(400, detail=str(exc))


def _build(model: Type[Record], payload: Dict[str, Any], prefix: str) -> Record:
    data = dict(payload)
    data.setdefault("id", portfolio.new_id(prefix))
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise HTTPException(422, detail=jsonable_encoder(exc.errors(include_url=False)))


def _tenant_or_404(container: StateContainer, tenant_id: str) -> Tenant:
    tenant = container.state.find_tenant(tenant_id)
    if tenant is None:
        raise HTTPException(404, detail=f"Tenant not found: {tenant_id}")
    return tenant


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/state")
def read_state(container: StateContainer = Depends(get_container)):
    return container.state.to_blob()


@router.put("/state/{collection}")
def replace_collection(
    collection: str,
    records: List[Dict[str, Any]] = Body(...),
    container: StateContainer = Depends(get_container),
):
    try:
        state = container.replace(collection, records)
    except KeyError:
        raise HTTPException(404, detail=f"Unknown collection: {collection}")
    except ValidationError as exc:
        raise HTTPException(422, detail=jsonable_encoder(exc.errors(include_url=False)))
    return state.to_blob()


@router.post("/reset")
def reset(confirm: bool = Query(False), container: StateContainer = Depends(get_container)):
    return _run(container, portfolio.reset_state, confirm=confirm).to_blob()


# ---------------------------------------------------------------------------
# Derived views
@router.get("/summary")
def monthly_summary(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    cumulative: bool = Query(False),
    container: StateContainer = Depends(get_container),
):
    summary = summarize_month(container.state, month or month_key(date.today()), cumulative=cumulative)
    return jsonable_encoder(summary)


@router.get("/vacancies")
def list_vacancies(container: StateContainer = Depends(get_container)):
    rooms = vacant_rooms(container.state)
    return jsonable_encoder({"items": rooms, "total": len(rooms)})


@router.get("/fees")
def all_fee_statuses(container: StateContainer = Depends(get_container)):
    return jsonable_encoder(fee_statuses(container.state))


@router.get("/tenants/{tenant_id}/fees")
def tenant_fees(tenant_id: str, container: StateContainer = Depends(get_container)):
    tenant = _tenant_or_404(container, tenant_id)
    return jsonable_encoder(fee_status(tenant, container.state.payments))


@router.get("/tenants/{tenant_id}/status")
def tenant_status(
    tenant_id: str,
    month: str = Query(..., pattern=MONTH_PATTERN),
    container: StateContainer = Depends(get_container),
):
    tenant = _tenant_or_404(container, tenant_id)
    return {"tenant_id": tenant.id, "month": month, "status": tenant_month_status(tenant, container.state.payments, month).value}


@router.get("/tenants/{tenant_id}/ledger")
def tenant_ledger(
    tenant_id: str,
    year: Optional[int] = Query(None),
    container: StateContainer = Depends(get_container),
):
    _tenant_or_404(container, tenant_id)
    state = container.state
    years = ledger_years(state.payments_of(tenant_id))
    selected = year or years[0]
    return jsonable_encoder({"year": selected, "years": years, "months": tenant_year_ledger(state, tenant_id, selected)})


@router.get("/timeline")
def timeline(
    offset: int = Query(0),
    today: Optional[date] = Query(None),
    container: StateContainer = Depends(get_container),
):
    return jsonable_encoder(project_timeline(container.state, today=today, month_offset=offset))


# ---------------------------------------------------------------------------
# Houses
@router.post("/houses")
def add_house(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    house = _build(House, payload, "h")
    _run(container, portfolio.add_house, house)
    return jsonable_encoder(house)


@router.put("/houses/{house_id}")
def update_house(house_id: str, payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    if container.state.find_house(house_id) is None:
        raise HTTPException(404, detail=f"House not found: {house_id}")
    house = _build(House, {**payload, "id": house_id}, "h")
    state = _run(container, portfolio.update_house, house)
    return jsonable_encoder(state.find_house(house_id))


@router.delete("/houses/{house_id}")
def delete_house(house_id: str, confirm: bool = Query(False), container: StateContainer = Depends(get_container)):
    if container.state.find_house(house_id) is None:
        raise HTTPException(404, detail=f"House not found: {house_id}")
    return _run(container, portfolio.delete_house, house_id, confirm=confirm).to_blob()


@router.get("/houses/{house_id}/rooms")
def house_rooms(
    house_id: str,
    exclude_tenant_id: Optional[str] = Query(None),
    container: StateContainer = Depends(get_container),
):
    return jsonable_encoder(room_options(container.state, house_id, exclude_tenant_id=exclude_tenant_id))


@router.post("/houses/{house_id}/maintenance")
def add_maintenance_note(
    house_id: str,
    text: str = Body(..., embed=True),
    container: StateContainer = Depends(get_container),
):
    if container.state.find_house(house_id) is None:
        raise HTTPException(404, detail=f"House not found: {house_id}")
    state = _run(container, portfolio.add_maintenance_note, house_id, text)
    return jsonable_encoder(state.find_house(house_id))


# ---------------------------------------------------------------------------
# Tenants, payments, leads, showings, items
@router.post("/tenants")
def save_tenant(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    tenant = _build(Tenant, payload, "t")
    state = _run(container, portfolio.save_tenant, tenant)
    return jsonable_encoder(state.find_tenant(tenant.id))


@router.post("/tenants/{tenant_id}/active")
def set_tenant_active(
    tenant_id: str,
    active: bool = Query(...),
    confirm: bool = Query(False),
    container: StateContainer = Depends(get_container),
):
    _tenant_or_404(container, tenant_id)
    state = _run(container, portfolio.set_tenant_active, tenant_id, active, confirm=confirm)
    return jsonable_encoder(state.find_tenant(tenant_id))


@router.delete("/tenants/{tenant_id}")
def delete_tenant(tenant_id: str, confirm: bool = Query(False), container: StateContainer = Depends(get_container)):
    _tenant_or_404(container, tenant_id)
    _run(container, portfolio.delete_tenant, tenant_id, confirm=confirm)
    return {"deleted": tenant_id}


@router.post("/payments")
def record_payment(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    payment = _build(Payment, payload, "p")
    state = _run(container, portfolio.record_payment, payment)
    return jsonable_encoder(state.find_payment(payment.id))


@router.delete("/payments/{payment_id}")
def delete_payment(payment_id: str, confirm: bool = Query(False), container: StateContainer = Depends(get_container)):
    if container.state.find_payment(payment_id) is None:
        raise HTTPException(404, detail=f"Payment not found: {payment_id}")
    _run(container, portfolio.delete_payment, payment_id, confirm=confirm)
    return {"deleted": payment_id}


@router.get("/payments/{payment_id}/receipt")
def payment_receipt(payment_id: str, container: StateContainer = Depends(get_container)):
    payment = container.state.find_payment(payment_id)
    if payment is None:
        raise HTTPException(404, detail=f"Payment not found: {payment_id}")
    return {"text": receipt_text(container.state, payment)}


@router.post("/leads")
def add_lead(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    lead = _build(Lead, payload, "l")
    state = _run(container, portfolio.add_lead, lead)
    return jsonable_encoder(state.find_lead(lead.id))


@router.post("/leads/{lead_id}/active")
def set_lead_active(
    lead_id: str,
    active: bool = Query(...),
    confirm: bool = Query(False),
    container: StateContainer = Depends(get_container),
):
    state = _run(container, portfolio.set_lead_active, lead_id, active, confirm=confirm)
    lead = state.find_lead(lead_id)
    if lead is None:
        raise HTTPException(404, detail=f"Lead not found: {lead_id}")
    return jsonable_encoder(lead)


@router.get("/leads/{lead_id}/conversion")
def conversion_defaults(lead_id: str, container: StateContainer = Depends(get_container)):
    lead = container.state.find_lead(lead_id)
    if lead is None:
        raise HTTPException(404, detail=f"Lead not found: {lead_id}")
    return jsonable_encoder(start_conversion(lead))


@router.post("/leads/{lead_id}/convert")
def convert(
    lead_id: str,
    form: Optional[ConversionForm] = Body(None),
    container: StateContainer = Depends(get_container),
):
    if container.state.find_lead(lead_id) is None:
        raise HTTPException(404, detail=f"Lead not found: {lead_id}")
    _, tenant = _run(container, convert_lead, lead_id, form)
    return jsonable_encoder(tenant)


@router.post("/showings")
def add_showing(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    showing = _build(Showing, payload, "s")
    state = _run(container, portfolio.add_showing, showing)
    return jsonable_encoder(state.find_showing(showing.id))


@router.post("/items")
def lend_item(payload: Dict[str, Any] = Body(...), container: StateContainer = Depends(get_container)):
    item = _build(LentItem, payload, "li")
    state = _run(container, portfolio.lend_item, item)
    return jsonable_encoder(state.find_lent_item(item.id))


@router.post("/items/{item_id}/return")
def return_item(item_id: str, container: StateContainer = Depends(get_container)):
    state = _run(container, portfolio.return_item, item_id)
    item = state.find_lent_item(item_id)
    if item is None:
        raise HTTPException(404, detail=f"Item not found: {item_id}")
    return jsonable_encoder(item)


app.include_router(router)
