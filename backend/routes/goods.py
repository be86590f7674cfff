# backend/routes/goods.py
from typing import Optional, List

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from services.clock import Clock, SystemClock
from services.inventory import InventoryService
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_current_user
from utils.uploads import remove_upload, save_upload
import schemas.goods as goods_schemas

router = APIRouter(prefix="/barang", tags=["Barang"])

_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock


def get_inventory(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> InventoryService:
    return InventoryService(db, clock=clock)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    # Multipart forms send empty strings for untouched inputs
    if value is None or not value.strip():
        return None
    return value


def _goods_out(goods) -> goods_schemas.GoodsResponse:
    return goods_schemas.GoodsResponse.model_validate(goods)


# =========================
# CREATE
# =========================
@router.post("", response_model=goods_schemas.GoodsResponse)
def create_goods(
    request: Request,
    nama: Optional[str] = Form(None),
    stok: Optional[str] = Form(None),
    harga: Optional[str] = Form(None),
    foto: Optional[UploadFile] = File(None),
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    photo_path = save_upload(foto)
    try:
        goods = inventory.create_goods(
            nama,
            initial_stock=_blank_to_none(stok),
            price_label=_blank_to_none(harga),
            photo_path=photo_path,
        )
    except Exception:
        remove_upload(photo_path)
        raise

    write_log(
        inventory.db, user_id=current_user.id, action="GOODS_CREATE", resource="barang",
        status="SUCCESS", ip=client_ip(request), meta={"id": goods.id, "kode": goods.code},
    )
    return _goods_out(goods)


# =========================
# LIST / SNAPSHOTS
# =========================
@router.get("", response_model=List[goods_schemas.GoodsResponse])
def list_goods(
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    return [_goods_out(g) for g in inventory.list_goods()]


@router.get("/stock-by-date", response_model=List[goods_schemas.StockByDateItem])
def stock_by_date(
    date: str = Query(..., description="Tanggal (YYYY-MM-DD)"),
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    rows = inventory.stock_snapshot(date)
    return [{"nama": r["name"], "total_stok": r["total_stock"]} for r in rows]


@router.get("/price-by-date", response_model=List[goods_schemas.PriceByDateItem])
def price_by_date(
    date: str = Query(..., description="Tanggal berlaku (YYYY-MM-DD)"),
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    rows = inventory.price_snapshot(date)
    return [{"nama": r["name"], "harga": r["price"]} for r in rows]


# =========================
# SINGLE GOODS
# =========================
@router.get("/{goods_id}", response_model=goods_schemas.GoodsResponse)
def get_goods(
    goods_id: str,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    return _goods_out(inventory.get_goods(goods_id))


@router.put("/{goods_id}", response_model=goods_schemas.GoodsResponse)
def update_goods(
    goods_id: str,
    request: Request,
    nama: Optional[str] = Form(None),
    stok: Optional[str] = Form(None),
    harga: Optional[str] = Form(None),
    foto: Optional[UploadFile] = File(None),
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    photo_path = save_upload(foto)
    patch = {
        "name": _blank_to_none(nama),
        "stock": _blank_to_none(stok),
        "price_label": _blank_to_none(harga),
        "photo_path": photo_path,
    }
    try:
        goods = inventory.update_goods(goods_id, patch)
    except Exception:
        remove_upload(photo_path)
        raise

    write_log(
        inventory.db, user_id=current_user.id, action="GOODS_UPDATE", resource="barang",
        status="SUCCESS", ip=client_ip(request),
        meta={"id": goods.id, "fields": sorted(k for k, v in patch.items() if v is not None)},
    )
    return _goods_out(goods)


@router.delete("/{goods_id}")
def delete_goods(
    goods_id: str,
    request: Request,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    inventory.delete_goods(goods_id)
    write_log(
        inventory.db, user_id=current_user.id, action="GOODS_DELETE", resource="barang",
        status="SUCCESS", ip=client_ip(request), meta={"id": goods_id},
    )
    return {"message": "deleted"}


# =========================
# LEDGERS
# =========================
@router.post("/{goods_id}/stock", response_model=goods_schemas.StockChangeResponse)
def change_stock(
    goods_id: str,
    payload: goods_schemas.StockChange,
    request: Request,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    new_level = inventory.adjust_stock(goods_id, payload.delta)
    write_log(
        inventory.db, user_id=current_user.id, action="STOCK_ADJUST", resource="barang",
        status="SUCCESS", ip=client_ip(request),
        meta={"id": goods_id, "delta": payload.delta, "stok": new_level},
    )
    return {"id": goods_id, "stok": new_level}


@router.post("/{goods_id}/price", response_model=goods_schemas.PriceResponse)
def add_price(
    goods_id: str,
    payload: goods_schemas.PriceCreate,
    request: Request,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    entry = inventory.add_price(goods_id, payload.harga, payload.tanggalBerlaku)
    write_log(
        inventory.db, user_id=current_user.id, action="PRICE_ADD", resource="barang",
        status="SUCCESS", ip=client_ip(request),
        meta={"id": goods_id, "harga": entry.price, "tanggalBerlaku": entry.effective_date.isoformat()},
    )
    return goods_schemas.PriceResponse.model_validate(entry)


@router.get("/{goods_id}/stock-logs", response_model=List[goods_schemas.StockLogResponse])
def stock_logs(
    goods_id: str,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    return [goods_schemas.StockLogResponse.model_validate(e) for e in inventory.stock_history(goods_id)]


@router.get("/{goods_id}/prices", response_model=List[goods_schemas.PriceResponse])
def price_history(
    goods_id: str,
    inventory: InventoryService = Depends(get_inventory),
    current_user: User = Depends(get_current_user),
):
    return [goods_schemas.PriceResponse.model_validate(e) for e in inventory.price_history(goods_id)]
