# backend/schemas/goods.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional, Union


# Base configuration for ORM compatibility; field names follow the public
# API (nama, kode, stok, ...) and read the English model attributes.
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# Full goods representation
class GoodsResponse(ORMBase):
    id: str
    nama: str = Field(validation_alias="name")
    kode: str = Field(validation_alias="code")
    stok: int = Field(validation_alias="stock")
    hargaText: Optional[str] = Field(default=None, validation_alias="price_label")
    fotoPath: Optional[str] = Field(default=None, validation_alias="photo_path")


# Body for POST /barang/{id}/stock
class StockChange(BaseModel):
    delta: int


class StockChangeResponse(BaseModel):
    id: str
    stok: int


# One stock ledger entry
class StockLogResponse(ORMBase):
    id: int
    barangId: str = Field(validation_alias="goods_id")
    delta: int
    stokAfter: int = Field(validation_alias="stock_after")
    createdAt: datetime = Field(validation_alias="created_at")


# Body for POST /barang/{id}/price; validated as decimal text by the service
class PriceCreate(BaseModel):
    harga: Union[str, int]
    tanggalBerlaku: str


class PriceResponse(ORMBase):
    id: int
    barangId: str = Field(validation_alias="goods_id")
    harga: str = Field(validation_alias="price")
    tanggalBerlaku: date = Field(validation_alias="effective_date")


# Rows of GET /barang/stock-by-date
class StockByDateItem(BaseModel):
    nama: str
    total_stok: int


# Rows of GET /barang/price-by-date
class PriceByDateItem(BaseModel):
    nama: str
    harga: str
