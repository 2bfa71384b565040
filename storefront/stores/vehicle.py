# storefront/stores/vehicle.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from storefront.constants import VEHICLE_STORAGE_KEY
from storefront.stores.persistence import KeyValueStorage, load_state, save_state

VEHICLE_STATE_VERSION = 1


class SelectedVehicle(SQLModel):
    model_config = ConfigDict(extra="forbid")

    make_id: int | None = None
    make_name: str | None = None
    model_id: int | None = None
    model_name: str | None = None
    year: int | None = Field(default=None, ge=1950, le=2100)

    def same_vehicle(self, other: "SelectedVehicle") -> bool:
        return (
            self.make_id == other.make_id
            and self.model_id == other.model_id
            and self.year == other.year
        )

    def label(self) -> str:
        parts = [self.make_name, self.model_name, str(self.year) if self.year else None]
        return " ".join(p for p in parts if p)


class VehicleState(SQLModel):
    selected: SelectedVehicle | None = None
    saved: list[SelectedVehicle] = Field(default_factory=list)


class VehicleStore:
    """
    Selected make/model/year for the compatibility filter, plus a
    list of saved vehicles unique by (make, model, year).
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.state = load_state(storage, VEHICLE_STORAGE_KEY, VehicleState, VEHICLE_STATE_VERSION)

    def _commit(self) -> None:
        save_state(self.storage, VEHICLE_STORAGE_KEY, self.state, VEHICLE_STATE_VERSION)

    @property
    def selected(self) -> SelectedVehicle | None:
        return self.state.selected

    @property
    def saved(self) -> list[SelectedVehicle]:
        return list(self.state.saved)

    def set_vehicle(self, vehicle: SelectedVehicle | None) -> None:
        self.state.selected = vehicle
        self._commit()

    def update_vehicle(self, updates: dict) -> None:
        """Merge partial updates into the selection (or start one)."""
        current = self.state.selected.model_dump() if self.state.selected else {}
        current.update({k: v for k, v in updates.items() if k in SelectedVehicle.model_fields})
        self.state.selected = SelectedVehicle.model_validate(current)
        self._commit()

    def clear_vehicle(self) -> None:
        self.state.selected = None
        self._commit()

    def add_saved(self, vehicle: SelectedVehicle) -> None:
        if any(v.same_vehicle(vehicle) for v in self.state.saved):
            return
        self.state.saved.append(vehicle)
        self._commit()

    def remove_saved(self, index: int) -> None:
        self.state.saved = [v for i, v in enumerate(self.state.saved) if i != index]
        self._commit()

    def set_saved(self, vehicles: list[SelectedVehicle]) -> None:
        self.state.saved = list(vehicles)
        self._commit()

    def selected_label(self) -> str:
        return self.state.selected.label() if self.state.selected else ""
