"""Static vendor directory and steel product catalog shown on the vendor page."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str = Field(description="Catalog product identifier")
    name: str = Field(description="Product name")
    price: float = Field(description="Price per unit")
    unit: str = Field(default="per ton", description="Pricing unit label")
    description: str = Field(default="", description="Short product description")


class Vendor(BaseModel):
    id: int
    name: str
    category: str
    rating: float
    contact: str
    email: str
    status: str = "Active"


VENDORS: List[Vendor] = [
    Vendor(id=1, name="Steel Supply Co.", category="Raw Materials", rating=4.8,
           contact="+91 (891) 123-4567", email="contact@steelsupply.com"),
    Vendor(id=2, name="Industrial Equipment Ltd.", category="Machinery", rating=4.6,
           contact="+91 (891) 987-6543", email="sales@indequip.com"),
    Vendor(id=3, name="Quality Tools Inc.", category="Tools & Equipment", rating=4.9,
           contact="+91 (891) 456-7890", email="info@qualitytools.com"),
]

STEEL_PRODUCTS: List[Product] = [
    Product(id="1", name="Hot Rolled Coils", price=45000, description="High-quality hot rolled steel coils for construction"),
    Product(id="2", name="Cold Rolled Sheets", price=52000, description="Precision cold rolled steel sheets for automotive"),
    Product(id="3", name="Wire Rods", price=48000, description="Steel wire rods for manufacturing applications"),
    Product(id="4", name="Structural Steel", price=50000, description="Beams, angles, and channels for construction"),
    Product(id="5", name="Steel Plates", price=47000, description="Heavy steel plates for industrial use"),
    Product(id="6", name="Steel Pipes", price=55000, description="Seamless and welded steel pipes"),
]


def get_product(product_id: str) -> Optional[Product]:
    return next((p for p in STEEL_PRODUCTS if p.id == product_id), None)


def average_vendor_rating() -> float:
    return round(sum(v.rating for v in VENDORS) / len(VENDORS), 1) if VENDORS else 0.0
