# schemas.py  (production state: materials / recipes / tanks / kegs / bottles / history)

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, confloat, conint, model_validator


# ===================== Enums =====================

class MaterialType(str, Enum):
    MALT = "MALT"
    HOPS = "HOPS"
    YEAST = "YEAST"
    ADJUNCT = "ADJUNCT"

class TankStatus(str, Enum):
    EMPTY = "Empty"
    FERMENTING = "Fermenting"
    CONDITIONING = "Conditioning"
    PACKAGING = "Packaging"

class KegStatus(str, Enum):
    EMPTY = "Empty"
    IN_HOUSE = "In-House"
    RETAIL = "Retail"
    DISTRIBUTOR = "Distributor"
    CLEANING = "Cleaning"

class ActionType(str, Enum):
    BREW = "BREW"
    KEG = "KEG"
    BOTTLE = "BOTTLE"
    FINISH = "FINISH"
    DISPATCH = "DISPATCH"
    RETURN = "RETURN"
    SALE = "SALE"


# ===================== Raw materials =====================

class RawMaterial(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    type: MaterialType
    quantity: confloat(ge=0) = 0.0      # kg for malt/adjunct, g for hops
    unit: str = "kg"
    lot_number: str = ""
    alpha_acid: Optional[float] = None  # hops only
    generation: Optional[int] = None    # yeast only


# ===================== Recipes =====================

class IngredientLine(BaseModel):
    model_config = ConfigDict(extra="ignore")

    material_id: str
    quantity: confloat(ge=0)            # per recipe.base_volume litres
    unit: str = ""
    # denormalized for display; the material record is authoritative
    name: Optional[str] = None
    type: Optional[MaterialType] = None

class Recipe(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    style: str = ""
    base_volume: confloat(gt=0) = 100.0
    og: float = 1.050
    fg: float = 1.010
    abv: float = 0.0                    # computed when the recipe is saved
    ibu: float = 0.0
    shelf_life: conint(ge=0) = 30       # days on the shelf after dispatch
    ingredients: List[IngredientLine] = Field(default_factory=list)


# ===================== Tanks (fermenter + current batch) =====================

class ConsumedIngredient(BaseModel):
    material_id: str
    amount: float

class QualityControl(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sensory_notes: str = ""
    is_approved: bool = False
    lab_notes: Optional[str] = None
    final_ph: Optional[float] = None
    final_abv: Optional[float] = None

class Tank(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    tank_id: str                        # display code, e.g. "FV-01"
    capacity: confloat(gt=0)
    status: TankStatus = TankStatus.EMPTY
    recipe_name: str = ""
    batch_id: str = ""                  # fresh per start_batch; stamped on filled kegs
    volume: confloat(ge=0) = 0.0
    brew_date: str = "-"
    conditioning_date: Optional[str] = None
    original_gravity: float = 1.050
    target_gravity: float = 1.010
    current_gravity: float = 1.000
    temperature: float = 20.0
    ph: float = 7.0
    ingredients: List[ConsumedIngredient] = Field(default_factory=list)
    quality_control: Optional[QualityControl] = None

    @model_validator(mode="after")
    def _volume_within_capacity(self) -> "Tank":
        if self.volume > self.capacity:
            raise ValueError(f"tank {self.tank_id} volume {self.volume} exceeds capacity {self.capacity}")
        return self


# ===================== Kegs =====================

class Keg(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str                             # QR code content, unique across the fleet
    capacity: confloat(gt=0)
    batch_id: str = ""
    recipe_name: str = ""
    fill_date: str = "-"
    volume: confloat(ge=0) = 0.0
    status: KegStatus = KegStatus.EMPTY
    customer: Optional[str] = None
    dispatch_date: Optional[str] = None  # first departure from the factory
    location_history: List[str] = Field(default_factory=list)


# ===================== Bottles =====================

LotKey = Tuple[str, str, float]

class BottleLot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recipe_name: str
    label_name: str
    volume_per_bottle: confloat(gt=0)   # litres, usually 0.6 or 0.5
    count: conint(ge=0) = 0

    @property
    def key(self) -> LotKey:
        return (self.recipe_name, self.label_name, self.volume_per_bottle)

    @property
    def total_volume(self) -> float:
        return self.count * self.volume_per_bottle


# ===================== History =====================

class SnapshotIngredient(BaseModel):
    name: str
    quantity: float
    unit: str = ""
    type: str = "N/A"

class RecipeSnapshot(BaseModel):
    name: str
    style: str = "N/A"
    ingredients: List[SnapshotIngredient] = Field(default_factory=list)

class BatchData(BaseModel):
    batch_id: str = ""
    start_date: str
    end_date: str
    tank_id: str
    recipe_snapshot: RecipeSnapshot
    quality_control: Optional[QualityControl] = None

class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    date: str                           # locale formatted, for display
    recorded_at: str = ""               # ISO timestamp, for filtering
    action_type: ActionType
    tank_id: str = "N/A"                # tank display code, keg id or "Bottle"
    recipe_name: str = "N/A"
    volume_changed: float = 0.0         # negative only for SALE
    details: str = ""
    batch_data: Optional[BatchData] = None


# ===================== Requests =====================

class MaterialIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: str
    type: MaterialType
    quantity: confloat(ge=0) = 0.0
    unit: str = "kg"
    lot_number: str = ""
    alpha_acid: Optional[float] = None
    generation: Optional[int] = None

class MaterialPatch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    type: Optional[MaterialType] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    lot_number: Optional[str] = None
    alpha_acid: Optional[float] = None
    generation: Optional[int] = None

class RecipeIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: str
    style: str = ""
    base_volume: confloat(gt=0) = 100.0
    og: float = 1.050
    fg: float = 1.010
    ibu: float = 0.0
    shelf_life: conint(ge=0) = 30
    ingredients: List[IngredientLine] = Field(default_factory=list)

class TankIn(BaseModel):
    id: Optional[str] = None
    tank_id: str
    capacity: float

class TankEquipmentIn(BaseModel):
    tank_id: Optional[str] = None
    capacity: Optional[float] = None

class StartBatchIn(BaseModel):
    recipe_name: str
    volume: float

class StatusIn(BaseModel):
    status: TankStatus

class FieldUpdateIn(BaseModel):
    field: str
    value: Any

class PackageKegIn(BaseModel):
    keg_id: str
    volume: float

class PackageBottlesIn(BaseModel):
    count: int
    volume_per_bottle: float
    label_name: str

class KegIn(BaseModel):
    id: str
    capacity: float

class KegUpdateIn(BaseModel):
    id: Optional[str] = None
    capacity: Optional[float] = None

class DispatchIn(BaseModel):
    location: str

class ReturnIn(BaseModel):
    remaining_volume: float = 0.0

class BottleFromKegIn(BaseModel):
    count: int
    volume_per_bottle: float
    label_name: str

class SaleIn(BaseModel):
    recipe_name: str
    label_name: str
    count: int
    volume_per_bottle: Optional[float] = None

class AnalysisOut(BaseModel):
    ok: bool = True
    text: str
    snapshot: Optional[Dict[str, Any]] = None
