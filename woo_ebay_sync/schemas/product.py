"""
Schema for WooCommerce catalog products as returned by the wc/v3 REST API.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WooProduct(BaseModel):
    """
    A WooCommerce product. Only the fields the eBay sync reads are modelled;
    everything else in the payload is ignored.
    """
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    id: Optional[int] = None
    sku: Optional[str] = None
    name: str = ""
    description: str = ""
    short_description: str = ""
    price: Optional[Decimal] = None
    regular_price: Optional[Decimal] = None
    stock_quantity: int = 0
    images: Union[List[Any], str, None] = Field(default_factory=list)
    type: str = "simple"
    variations: List[Any] = Field(default_factory=list)

    @field_validator('sku', mode='before')
    @classmethod
    def validate_sku(cls, v):
        """Blank SKUs are treated as missing"""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator('name', 'description', 'short_description', mode='before')
    @classmethod
    def validate_text(cls, v):
        return "" if v is None else str(v)

    @field_validator('price', 'regular_price', mode='before')
    @classmethod
    def validate_price(cls, v):
        """Woo sends prices as strings; empty string means no price"""
        if v is None or v == '':
            return None
        try:
            price = Decimal(str(v))
        except (InvalidOperation, ValueError):
            raise ValueError(f'Price must be a valid number, got: {v}')
        if not price.is_finite():
            return None
        return price

    @field_validator('stock_quantity', mode='before')
    @classmethod
    def validate_stock_quantity(cls, v):
        """Missing or non-finite stock counts as zero; negatives clamp to zero"""
        if v is None or v == '':
            return 0
        try:
            number = float(v)
        except (TypeError, ValueError):
            return 0
        if not math.isfinite(number):
            return 0
        return max(int(number), 0)

    @field_validator('variations', mode='before')
    @classmethod
    def validate_variations(cls, v):
        return v or []

    @property
    def is_simple(self) -> bool:
        """Only simple (or zero-variation) products are synced"""
        return self.type == "simple" or len(self.variations) == 0

    @property
    def effective_price(self) -> Optional[Decimal]:
        if self.price is not None:
            return self.price
        return self.regular_price

    @property
    def listing_description(self) -> str:
        return self.short_description or self.description or self.name

    @property
    def label(self) -> str:
        return self.sku or f'"{self.name}" (no sku)'
