# storefront/schemas/vehicle.py
from sqlmodel import SQLModel, Field

from storefront.stores.vehicle import SelectedVehicle


class VehicleView(SQLModel):
    selected: SelectedVehicle | None = None
    saved: list[SelectedVehicle] = Field(default_factory=list)
    label: str = ""
