"""Pydantic schemas for records, users and API payloads.

Field names are snake_case in Python and camelCase on the wire, which keeps
snapshots exported from the legacy browser storage loadable as-is.
"""
import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"


class View(str, Enum):
    """Identifiers of the top-level views gated by the permission model."""

    PRODUCTION = "production"
    PRESTATION_PROD = "prestation_prod"
    PRESTATION_ETUVAGE = "prestation_etuvage"
    STOCK = "stock"
    INSIGHTS = "insights"
    MANAGEMENT = "management"


class RecordKind(str, Enum):
    PRODUCTION = "production"
    PURCHASE = "purchase"
    STOCK_OUT = "stock_out"
    PRESTATION_PROD = "prestation_prod"
    PRESTATION_ETUVAGE = "prestation_etuvage"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"


class MasterDataCategory(str, Enum):
    PRODUCTS = "products"
    CLIENTS = "clients"
    PACKAGINGS = "packagings"
    SUPPLIERS = "suppliers"
    PURCHASE_CATEGORIES = "purchaseCategories"
    SERVICE_TYPES = "serviceTypes"


RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonNegativeFloat = Annotated[float, Field(ge=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoredRecord(CamelModel):
    """Identity and audit stamp shared by every ledger record."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int = 0
    user_id: Optional[str] = None
    user_name: Optional[str] = None


# Production
class ProductionFields(CamelModel):
    date: datetime.date
    lot_number: str
    client_name: str = ""
    product_name: str = ""
    packaging: str = ""
    employee_count: NonNegativeInt = 0
    total_weight_kg: NonNegativeFloat = 0.0
    waste_kg: NonNegativeFloat = 0.0
    # Percentage, 0-100 expected but not enforced.
    infestation_rate: NonNegativeFloat = 0.0


class ProductionRecordCreate(ProductionFields):
    lot_number: RequiredText


class ProductionRecordUpdate(CamelModel):
    date: Optional[datetime.date] = None
    lot_number: Optional[RequiredText] = None
    client_name: Optional[str] = None
    product_name: Optional[str] = None
    packaging: Optional[str] = None
    employee_count: Optional[NonNegativeInt] = None
    total_weight_kg: Optional[NonNegativeFloat] = None
    waste_kg: Optional[NonNegativeFloat] = None
    infestation_rate: Optional[NonNegativeFloat] = None


class ProductionRecord(ProductionFields, StoredRecord):
    """A production lot as persisted."""


# Purchases
class PurchaseFields(CamelModel):
    date: datetime.date
    supplier: str = ""
    category: str = ""
    item_name: str = ""
    quantity: NonNegativeFloat = 0.0
    unit: str = ""
    unit_price: NonNegativeFloat = 0.0
    total_amount: NonNegativeFloat = 0.0
    lot_number: Optional[str] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None


class PurchaseRecordCreate(PurchaseFields):
    item_name: RequiredText
    # Defaults to quantity * unit_price when omitted.
    total_amount: Optional[NonNegativeFloat] = None


class PurchaseRecordUpdate(CamelModel):
    date: Optional[datetime.date] = None
    supplier: Optional[str] = None
    category: Optional[str] = None
    item_name: Optional[RequiredText] = None
    quantity: Optional[NonNegativeFloat] = None
    unit: Optional[str] = None
    unit_price: Optional[NonNegativeFloat] = None
    total_amount: Optional[NonNegativeFloat] = None
    lot_number: Optional[str] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None


class PurchaseRecord(PurchaseFields, StoredRecord):
    pass


# Stock-outs
class StockOutFields(CamelModel):
    date: datetime.date
    item_name: str = ""
    quantity: NonNegativeFloat = 0.0
    unit: str = ""
    destination: str = ""
    lot_number: Optional[str] = None
    reason: Optional[str] = None


class StockOutRecordCreate(StockOutFields):
    item_name: RequiredText


class StockOutRecordUpdate(CamelModel):
    date: Optional[datetime.date] = None
    item_name: Optional[RequiredText] = None
    quantity: Optional[NonNegativeFloat] = None
    unit: Optional[str] = None
    destination: Optional[str] = None
    lot_number: Optional[str] = None
    reason: Optional[str] = None


class StockOutRecord(StockOutFields, StoredRecord):
    pass


# Prestations: general processing services
class PrestationProdFields(CamelModel):
    date: datetime.date
    client_name: str = ""
    service_type: str = ""
    quantity_kg: NonNegativeFloat = 0.0
    unit_price: NonNegativeFloat = 0.0
    total_amount: NonNegativeFloat = 0.0
    lot_number: Optional[str] = None
    notes: Optional[str] = None


class PrestationProdRecordCreate(PrestationProdFields):
    client_name: RequiredText
    service_type: RequiredText
    total_amount: Optional[NonNegativeFloat] = None


class PrestationProdRecordUpdate(CamelModel):
    date: Optional[datetime.date] = None
    client_name: Optional[RequiredText] = None
    service_type: Optional[RequiredText] = None
    quantity_kg: Optional[NonNegativeFloat] = None
    unit_price: Optional[NonNegativeFloat] = None
    total_amount: Optional[NonNegativeFloat] = None
    lot_number: Optional[str] = None
    notes: Optional[str] = None


class PrestationProdRecord(PrestationProdFields, StoredRecord):
    pass


# Prestations: steaming / treatment service
class PrestationEtuvageFields(CamelModel):
    date: datetime.date
    client_name: str = ""
    product_name: str = ""
    quantity_kg: NonNegativeFloat = 0.0
    duration_hours: NonNegativeFloat = 0.0
    temperature_c: Optional[float] = None
    unit_price: NonNegativeFloat = 0.0
    total_amount: NonNegativeFloat = 0.0
    lot_number: Optional[str] = None
    notes: Optional[str] = None


class PrestationEtuvageRecordCreate(PrestationEtuvageFields):
    client_name: RequiredText
    total_amount: Optional[NonNegativeFloat] = None


class PrestationEtuvageRecordUpdate(CamelModel):
    date: Optional[datetime.date] = None
    client_name: Optional[RequiredText] = None
    product_name: Optional[str] = None
    quantity_kg: Optional[NonNegativeFloat] = None
    duration_hours: Optional[NonNegativeFloat] = None
    temperature_c: Optional[float] = None
    unit_price: Optional[NonNegativeFloat] = None
    total_amount: Optional[NonNegativeFloat] = None
    lot_number: Optional[str] = None
    notes: Optional[str] = None


class PrestationEtuvageRecord(PrestationEtuvageFields, StoredRecord):
    pass


RECORD_MODELS: dict[RecordKind, type[StoredRecord]] = {
    RecordKind.PRODUCTION: ProductionRecord,
    RecordKind.PURCHASE: PurchaseRecord,
    RecordKind.STOCK_OUT: StockOutRecord,
    RecordKind.PRESTATION_PROD: PrestationProdRecord,
    RecordKind.PRESTATION_ETUVAGE: PrestationEtuvageRecord,
}

RECORD_VIEWS: dict[RecordKind, View] = {
    RecordKind.PRODUCTION: View.PRODUCTION,
    RecordKind.PURCHASE: View.STOCK,
    RecordKind.STOCK_OUT: View.STOCK,
    RecordKind.PRESTATION_PROD: View.PRESTATION_PROD,
    RecordKind.PRESTATION_ETUVAGE: View.PRESTATION_ETUVAGE,
}


# Master data
class MasterData(CamelModel):
    """Controlled vocabularies used to populate entry forms."""

    model_config = ConfigDict(frozen=True)

    products: list[str] = Field(default_factory=list)
    clients: list[str] = Field(default_factory=list)
    packagings: list[str] = Field(default_factory=list)
    suppliers: list[str] = Field(default_factory=list)
    purchase_categories: list[str] = Field(default_factory=list)
    service_types: list[str] = Field(default_factory=list)

    def values(self, category: MasterDataCategory) -> list[str]:
        return list(getattr(self, MASTER_DATA_FIELDS[category]))

    def with_values(self, category: MasterDataCategory, values: list[str]) -> "MasterData":
        return self.model_copy(update={MASTER_DATA_FIELDS[category]: list(values)})


MASTER_DATA_FIELDS: dict[MasterDataCategory, str] = {
    MasterDataCategory.PRODUCTS: "products",
    MasterDataCategory.CLIENTS: "clients",
    MasterDataCategory.PACKAGINGS: "packagings",
    MasterDataCategory.SUPPLIERS: "suppliers",
    MasterDataCategory.PURCHASE_CATEGORIES: "purchase_categories",
    MasterDataCategory.SERVICE_TYPES: "service_types",
}

DEFAULT_MASTER_DATA = MasterData(
    products=["Tomate Roma", "Tomate Cerise", "Poivron Rouge", "Poivron Vert", "Concombre"],
    clients=["Marché de Gros", "Superette Center", "Export France", "Export Dubaï"],
    packagings=["Caisse 10kg", "Caisse 5kg", "Plateau", "Vrac"],
    suppliers=["AgriPlus", "Sidi Bel Abbes Semences", "Local Farmer"],
    purchase_categories=["Intrants", "Emballages", "Maintenance", "Semences"],
    service_types=["Triage", "Calibrage", "Conditionnement", "Lavage"],
)


class MasterDataValue(CamelModel):
    value: RequiredText


# Users
class User(CamelModel):
    """Persisted user account."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    username: str
    password_hash: str = ""
    role: Role = Role.OPERATOR
    allowed_tabs: list[View] = Field(default_factory=list)
    created_at: int = 0


class UserResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    username: str
    role: Role
    allowed_tabs: list[View]
    created_at: int


class AuthUserResponse(UserResponse):
    views: dict[str, bool]


class UserCreate(CamelModel):
    name: RequiredText
    username: RequiredText
    password: RequiredText


class PermissionsUpdate(CamelModel):
    allowed_tabs: list[View]


# Auth schemas
class LoginRequest(CamelModel):
    username: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthUserResponse


# Read models
class ReadModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


class DailyTotalsResponse(ReadModel):
    date: datetime.date
    total_weight_kg: float
    total_employees: int
    total_waste_kg: float
    record_count: int


class SeriesPointResponse(ReadModel):
    date: datetime.date
    total_weight_kg: float
    total_employees: int
    record_count: int


class DashboardResponse(ReadModel):
    date: datetime.date
    totals: DailyTotalsResponse
    productivity: float
    waste_rate: float
    trend: Trend
    previous_weight_kg: float
    series: list[SeriesPointResponse]


class LedgerSummaryResponse(ReadModel):
    start: Optional[datetime.date] = None
    end: Optional[datetime.date] = None
    record_count: int
    total_quantity_kg: float
    total_amount: float
    amount_by_category: dict[str, float]
    amount_by_client: dict[str, float]


class StockBalanceResponse(ReadModel):
    item_name: str
    unit: str
    quantity_in: float
    quantity_out: float
    balance: float


class TracedPurchaseResponse(ReadModel):
    purchase: PurchaseRecord
    reasons: list[str]


class TracedStockOutResponse(ReadModel):
    stock_out: StockOutRecord
    reasons: list[str]


class RelatedLotResponse(ReadModel):
    lot: ProductionRecord
    reasons: list[str]


class LotTraceResponse(ReadModel):
    lot: ProductionRecord
    purchases: list[TracedPurchaseResponse]
    stock_outs: list[TracedStockOutResponse]
    related_lots: list[RelatedLotResponse]


class InsightsResponse(CamelModel):
    text: str
    record_count: int


class SampleDataResponse(CamelModel):
    created: int


class BackupImportResponse(CamelModel):
    counts: dict[str, int]
