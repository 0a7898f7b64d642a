import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from print_pricing import __version__
from print_pricing.engine import (
    BrokerCategoryDiscount,
    CatalogLookupError,
    PricingRequest,
    SelectedAddon,
    ValidationError,
)
from print_pricing.api.state import engine, get_catalog

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Print Pricing API",
    description="Server-side pricing for print product configurations",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SelectedAddonBody(BaseModel):
    addon_id: str = Field(alias="addonId")
    quantity: Optional[int] = None
    options: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class BrokerDiscountBody(BaseModel):
    category_id: str = Field(alias="categoryId")
    discount_percent: float = Field(alias="discountPercent")

    model_config = {"populate_by_name": True}


class CalcRequest(BaseModel):
    paper_stock_id: Optional[str] = Field(default=None, alias="paperStockId")
    turnaround_id: Optional[str] = Field(default=None, alias="turnaroundId")
    sides: str = "single"
    size_selection: str = Field(default="standard", alias="sizeSelection")
    standard_size_id: Optional[str] = Field(default=None, alias="standardSizeId")
    custom_width: Optional[float] = Field(default=None, alias="customWidth")
    custom_height: Optional[float] = Field(default=None, alias="customHeight")
    quantity_selection: str = Field(default="standard", alias="quantitySelection")
    standard_quantity_id: Optional[str] = Field(default=None, alias="standardQuantityId")
    custom_quantity: Optional[int] = Field(default=None, alias="customQuantity")
    selected_addons: List[SelectedAddonBody] = Field(default_factory=list, alias="selectedAddons")
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    product_id: Optional[str] = Field(default=None, alias="productId")
    is_broker: bool = Field(default=False, alias="isBroker")
    broker_category_discounts: List[BrokerDiscountBody] = Field(
        default_factory=list, alias="brokerCategoryDiscounts"
    )

    model_config = {"populate_by_name": True}

    def to_request(self) -> PricingRequest:
        return PricingRequest(
            paper_stock_id=self.paper_stock_id,
            turnaround_id=self.turnaround_id,
            sides=self.sides,
            size_selection=self.size_selection,
            standard_size_id=self.standard_size_id,
            custom_width=self.custom_width,
            custom_height=self.custom_height,
            quantity_selection=self.quantity_selection,
            standard_quantity_id=self.standard_quantity_id,
            custom_quantity=self.custom_quantity,
            selected_addons=[
                SelectedAddon(addon_id=a.addon_id, quantity=a.quantity, options=a.options)
                for a in self.selected_addons
            ],
            category_id=self.category_id,
            product_id=self.product_id,
            is_broker=self.is_broker,
            broker_category_discounts=[
                BrokerCategoryDiscount(category_id=d.category_id, discount_percent=d.discount_percent)
                for d in self.broker_category_discounts
            ],
        )


class QuickCalcRequest(BaseModel):
    price_per_sq_inch: float = Field(alias="pricePerSqInch")
    size: float
    quantity: float
    is_double_sided: bool = Field(default=False, alias="isDoubleSided")
    is_exception_paper: bool = Field(default=False, alias="isExceptionPaper")

    model_config = {"populate_by_name": True}


def _validation_detail(error: ValidationError) -> dict:
    detail = {"errors": error.errors}
    if error.suggestion is not None:
        detail["suggestion"] = asdict(error.suggestion)
    return detail


@app.get("/")
async def root():
    return {"status": "online", "message": "Print Pricing API Active"}


@app.post("/calculate")
async def calculate_price(req: CalcRequest):
    try:
        result = engine.calculate_price(req.to_request(), get_catalog())
    except ValidationError as e:
        logger.warning("Rejected pricing request: %s", e)
        raise HTTPException(status_code=400, detail=_validation_detail(e))
    except CatalogLookupError as e:
        logger.warning("Catalog lookup failed: %s", e)
        raise HTTPException(status_code=409, detail={"errors": [e.user_message]})
    return jsonable_encoder(result.to_dict())


@app.post("/quick-calculate")
async def quick_calculate(req: QuickCalcRequest):
    base_price = engine.quick_calculate(
        req.price_per_sq_inch, req.size, req.quantity, req.is_double_sided, req.is_exception_paper
    )
    return {"basePrice": base_price}


@app.get("/validate/size")
async def validate_size(width: float, height: float):
    check = engine.validate_custom_size(width, height)
    return {"isValid": check.is_valid, "errors": check.errors}


@app.get("/validate/quantity")
async def validate_quantity(quantity: int):
    check = engine.validate_custom_quantity(quantity)
    return {
        "isValid": check.is_valid,
        "error": check.error,
        "suggestion": asdict(check.suggestion) if check.suggestion else None,
    }


@app.get("/catalog")
async def get_catalog_snapshot():
    return jsonable_encoder(asdict(get_catalog()))


@app.get("/system/status")
async def get_status():
    catalog = get_catalog()
    return {
        "engine_active": True,
        "version": __version__,
        "catalog": {
            "sizes": len(catalog.sizes),
            "quantities": len(catalog.quantities),
            "paper_stocks": len(catalog.paper_stocks),
            "turnarounds": len(catalog.turnarounds),
            "addons": len(catalog.addons),
        },
    }
