# storefront/routers/vehicle.py
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.core.session import get_vehicle_store
from storefront.schemas.vehicle import VehicleView
from storefront.stores.vehicle import SelectedVehicle, VehicleStore

router = APIRouter(prefix="/vehicle", tags=["Vehicle"])


def _view(store: VehicleStore) -> VehicleView:
    return VehicleView(selected=store.selected, saved=store.saved, label=store.selected_label())


@router.get("", response_model=VehicleView)
def get_vehicle(store: VehicleStore = Depends(get_vehicle_store)):
    """
    Selected vehicle used by the compatibility filter, plus saved ones.
    """
    return _view(store)


@router.put("", response_model=VehicleView)
def set_vehicle(
    payload: SelectedVehicle,
    store: VehicleStore = Depends(get_vehicle_store),
):
    store.set_vehicle(payload)
    return _view(store)


@router.patch("", response_model=VehicleView)
def update_vehicle(
    payload: SelectedVehicle,
    store: VehicleStore = Depends(get_vehicle_store),
):
    """
    Merge only the fields sent into the current selection.
    """
    store.update_vehicle(payload.model_dump(exclude_unset=True))
    return _view(store)


@router.delete("", response_model=VehicleView)
def clear_vehicle(store: VehicleStore = Depends(get_vehicle_store)):
    store.clear_vehicle()
    return _view(store)


@router.post("/saved", response_model=VehicleView)
def add_saved_vehicle(
    payload: SelectedVehicle,
    store: VehicleStore = Depends(get_vehicle_store),
):
    """
    Save a vehicle. A vehicle with the same make, model and year is
    only kept once.
    """
    store.add_saved(payload)
    return _view(store)


@router.delete("/saved/{index}", response_model=VehicleView)
def remove_saved_vehicle(
    index: int,
    store: VehicleStore = Depends(get_vehicle_store),
):
    if index < 0 or index >= len(store.saved):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Saved vehicle not found",
        )
    store.remove_saved(index)
    return _view(store)
