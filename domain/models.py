"""
domain/models.py
================
Immutable data model of a heat-load project: building, floors, rooms and their
envelope elements.

Every entity has a tolerant ``from_dict`` (camelCase payloads as stored by the
web client, numbers possibly as strings) and a ``to_dict`` producing the same
shape. Updates go through ``dataclasses.replace`` based ``with_*`` helpers so
callers never mutate shared state.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from domain.presets import coerce_era, coerce_insulation, BuildingEra, InsulationLevel
from domain.units import non_negative, parse_number
from domain.ventilation import VentilationConfig, normalize_ventilation


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _opt(data: Mapping[str, Any], key: str) -> Optional[float]:
    return parse_number(data.get(key))


def _num(data: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    return non_negative(data.get(key), default)


def _items(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = data.get(key) or []
    return [v for v in value if isinstance(v, Mapping)] if isinstance(value, (list, tuple)) else []


# ---------------------------------------------------------------------------
# Envelope elements
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Wall:
    """
    Exterior (or partition) wall.

    Parameters
    ----------
    area    : Net wall area              [m²]
    u_value : Thermal transmittance      [W/(m²·K)]  None → derived/preset
    r_value : Thermal resistance         [m²·K/W]    used when U is missing
    length  : Wall length                [m]
    """

    id: str = field(default_factory=new_id)
    name: Optional[str] = None
    area: float = 0.0
    u_value: Optional[float] = None
    r_value: Optional[float] = None
    length: float = 0.0
    type: str = ""
    material: str = ""
    is_exterior: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Wall":
        return cls(
            id=str(data.get("id") or new_id()),
            name=data.get("name"),
            area=_num(data, "area"),
            u_value=_opt(data, "uValue"),
            r_value=_opt(data, "rValue"),
            length=_num(data, "length"),
            type=str(data.get("type") or ""),
            material=str(data.get("material") or ""),
            is_exterior=bool(data.get("isExterior", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "name": self.name, "area": self.area,
            "uValue": self.u_value, "rValue": self.r_value, "length": self.length,
            "type": self.type, "material": self.material, "isExterior": self.is_exterior,
        }


@dataclass(frozen=True)
class Window:
    id: str = field(default_factory=new_id)
    name: Optional[str] = None
    area: float = 0.0
    u_value: Optional[float] = None
    type: str = ""
    orientation: str = "South"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Window":
        return cls(
            id=str(data.get("id") or new_id()),
            name=data.get("name"),
            area=_num(data, "area"),
            u_value=_opt(data, "uValue"),
            type=str(data.get("type") or ""),
            orientation=str(data.get("orientation") or "South"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "name": self.name, "area": self.area, "uValue": self.u_value,
            "type": self.type, "orientation": self.orientation,
        }


@dataclass(frozen=True)
class Door:
    id: str = field(default_factory=new_id)
    name: Optional[str] = None
    area: float = 0.0
    u_value: Optional[float] = None
    to_unheated: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Door":
        return cls(
            id=str(data.get("id") or new_id()),
            name=data.get("name"),
            area=_num(data, "area"),
            u_value=_opt(data, "uValue"),
            to_unheated=bool(data.get("toUnheated", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "name": self.name, "area": self.area,
            "uValue": self.u_value, "toUnheated": self.to_unheated,
        }


@dataclass(frozen=True)
class CeilingConfig:
    """Ceiling / roof surface; ``area`` None means "same as the room"."""

    area: Optional[float] = None
    u_value: Optional[float] = None
    insulated: bool = False
    insulation_standard: str = "none"
    roof_type: str = "Flachdach"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CeilingConfig":
        return cls(
            area=_opt(data, "area"),
            u_value=_opt(data, "uValue"),
            insulated=bool(data.get("insulated", False)),
            insulation_standard=str(data.get("insulationStandard") or "none"),
            roof_type=str(data.get("roofType") or "Flachdach"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area": self.area, "uValue": self.u_value, "insulated": self.insulated,
            "insulationStandard": self.insulation_standard, "roofType": self.roof_type,
        }


@dataclass(frozen=True)
class FloorConfig:
    """Floor slab; ``floor_type`` ∈ beheizt | unbeheizt | erdreich | aussenluft."""

    area: Optional[float] = None
    u_value: Optional[float] = None
    floor_type: str = "unbeheizt"
    heated: bool = False
    insulated: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FloorConfig":
        return cls(
            area=_opt(data, "area"),
            u_value=_opt(data, "uValue"),
            floor_type=str(data.get("floorType") or "unbeheizt"),
            heated=bool(data.get("heated", False)),
            insulated=bool(data.get("insulated", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area": self.area, "uValue": self.u_value, "floorType": self.floor_type,
            "heated": self.heated, "insulated": self.insulated,
        }


@dataclass(frozen=True)
class ThermalBridge:
    """Linear thermal bridge: ψ [W/(m·K)] over ``length`` [m]."""

    id: str = field(default_factory=new_id)
    name: str = "Wärmebrücke"
    psi_value: float = 0.0
    length: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThermalBridge":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or "Wärmebrücke"),
            psi_value=_num(data, "psiValue"),
            length=_num(data, "length"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "psiValue": self.psi_value, "length": self.length}


@dataclass(frozen=True)
class Heater:
    """
    Radiator or underfloor circuit serving a room.

    Parameters
    ----------
    output     : Design-point output      [W]
    regime     : Flow/return/room temps   e.g. "75/65/20"
    valve_type : Free text valve description, used for brand detection
    """

    id: str = field(default_factory=new_id)
    type: str = "radiator"
    output: float = 0.0
    valve_type: str = ""
    regime: str = "75/65/20"
    room_temp: float = 20.0
    brand: str = ""
    series: str = ""
    height: Optional[float] = None
    width: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Heater":
        return cls(
            id=str(data.get("id") or new_id()),
            type=str(data.get("type") or "radiator"),
            output=_num(data, "output"),
            valve_type=str(data.get("valveType") or data.get("valveBrand") or ""),
            regime=str(data.get("standardRegime") or data.get("regime") or "75/65/20"),
            room_temp=non_negative(data.get("roomTemp"), 20.0),
            brand=str(data.get("brand") or ""),
            series=str(data.get("series") or ""),
            height=_opt(data, "height"),
            width=_opt(data, "width"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "type": self.type, "output": self.output, "valveType": self.valve_type,
            "standardRegime": self.regime, "roomTemp": self.room_temp, "brand": self.brand,
            "series": self.series, "height": self.height, "width": self.width,
        }


# ---------------------------------------------------------------------------
# Room / Floor
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Room:
    """
    One heated room and its envelope.

    Parameters
    ----------
    area               : Net floor area                 [m²]
    height             : Clear room height              [m]
    target_temperature : Design indoor temperature      [°C]  None → room type / building default
    internal_gains_w   : Internal gains                 [W]
    """

    id: str = field(default_factory=new_id)
    name: str = ""
    area: float = 0.0
    height: float = 2.5
    target_temperature: Optional[float] = None
    walls: Tuple[Wall, ...] = ()
    windows: Tuple[Window, ...] = ()
    doors: Tuple[Door, ...] = ()
    ceiling: Optional[CeilingConfig] = None
    floor: Optional[FloorConfig] = None
    ventilation: Optional[VentilationConfig] = None
    heaters: Tuple[Heater, ...] = ()
    thermal_bridges: Tuple[ThermalBridge, ...] = ()
    internal_gains_w: Optional[float] = None

    @property
    def volume(self) -> float:
        return non_negative(self.area) * non_negative(self.height)

    @property
    def gains_w(self) -> float:
        """Room-level gains, or the ones stored with the ventilation settings."""
        if self.internal_gains_w is not None:
            return non_negative(self.internal_gains_w)
        return self.ventilation.internal_gains_w if self.ventilation else 0.0

    @property
    def room_type(self) -> str:
        return self.ventilation.room_type if self.ventilation else "custom"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Room":
        ceiling = data.get("ceilingConfig")
        floor = data.get("floorConfig")
        height = parse_number(data.get("height"))
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            area=_num(data, "area"),
            height=2.5 if height is None else max(0.0, height),
            target_temperature=_opt(data, "targetTemperature"),
            walls=tuple(Wall.from_dict(w) for w in _items(data, "walls")),
            windows=tuple(Window.from_dict(w) for w in _items(data, "windows")),
            doors=tuple(Door.from_dict(d) for d in _items(data, "doors")),
            ceiling=CeilingConfig.from_dict(ceiling) if isinstance(ceiling, Mapping) else None,
            floor=FloorConfig.from_dict(floor) if isinstance(floor, Mapping) else None,
            ventilation=normalize_ventilation(data.get("ventilation")),
            heaters=tuple(Heater.from_dict(h) for h in _items(data, "heaters")),
            thermal_bridges=tuple(ThermalBridge.from_dict(t) for t in _items(data, "thermalBridges")),
            internal_gains_w=_opt(data, "internalGainsW"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "area": self.area,
            "height": self.height,
            "targetTemperature": self.target_temperature,
            "walls": [w.to_dict() for w in self.walls],
            "windows": [w.to_dict() for w in self.windows],
            "doors": [d.to_dict() for d in self.doors],
            "ceilingConfig": self.ceiling.to_dict() if self.ceiling else None,
            "floorConfig": self.floor.to_dict() if self.floor else None,
            "ventilation": self.ventilation.to_dict() if self.ventilation else None,
            "heaters": [h.to_dict() for h in self.heaters],
            "thermalBridges": [t.to_dict() for t in self.thermal_bridges],
            "internalGainsW": self.internal_gains_w,
        }


@dataclass(frozen=True)
class Floor:
    id: str = field(default_factory=new_id)
    name: str = ""
    rooms: Tuple[Room, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Floor":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            rooms=tuple(Room.from_dict(r) for r in _items(data, "rooms")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "rooms": [r.to_dict() for r in self.rooms]}


# ---------------------------------------------------------------------------
# Building / project meta
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PVHeatPumpSettings:
    has_pv: bool = False
    pv_kwp: Optional[float] = None
    has_heat_pump: bool = False
    hp_type: Optional[str] = None
    buffer_tank: bool = False
    buffer_size_liters: Optional[float] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    capacity: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PVHeatPumpSettings":
        return cls(
            has_pv=bool(data.get("hasPV", False)),
            pv_kwp=_opt(data, "pvKwp"),
            has_heat_pump=bool(data.get("hasHeatPump", False)),
            hp_type=data.get("hpType"),
            buffer_tank=bool(data.get("bufferTank", False)),
            buffer_size_liters=_opt(data, "bufferSizeLiters"),
            brand=data.get("brand"),
            model=data.get("model"),
            capacity=_opt(data, "capacity"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasPV": self.has_pv, "pvKwp": self.pv_kwp, "hasHeatPump": self.has_heat_pump,
            "hpType": self.hp_type, "bufferTank": self.buffer_tank,
            "bufferSizeLiters": self.buffer_size_liters, "brand": self.brand,
            "model": self.model, "capacity": self.capacity,
        }


@dataclass(frozen=True)
class BuildingMetadata:
    """
    Building-level inputs.

    ``manual_design_outdoor_temp_c`` always wins over the looked-up
    ``design_outdoor_temp_c``.
    """

    postal_code: str = ""
    location: str = ""
    address: str = ""
    building_type: str = ""
    construction_year: Optional[int] = None
    floors: int = 1
    residents: int = 1
    temperature_preference: float = 21.0
    building_era: BuildingEra = BuildingEra.PRE_1978
    insulation_level: InsulationLevel = InsulationLevel.NONE
    design_outdoor_temp_c: Optional[float] = None
    manual_design_outdoor_temp_c: Optional[float] = None
    design_outdoor_temp_meta: Dict[str, Any] = field(default_factory=dict)
    airtightness_test_type: str = "none"
    n50_value: Optional[float] = None
    thermal_bridge_preset: Optional[str] = None
    pv_heat_pump: PVHeatPumpSettings = field(default_factory=PVHeatPumpSettings)

    @property
    def design_outdoor_temp(self) -> Optional[float]:
        if self.manual_design_outdoor_temp_c is not None:
            return self.manual_design_outdoor_temp_c
        return self.design_outdoor_temp_c

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildingMetadata":
        year = parse_number(data.get("constructionYear"))
        pv = data.get("pvHeatPump")
        return cls(
            postal_code=str(data.get("postalCode") or ""),
            location=str(data.get("location") or ""),
            address=str(data.get("address") or ""),
            building_type=str(data.get("buildingType") or ""),
            construction_year=int(year) if year is not None else None,
            floors=int(_num(data, "floors", 1)),
            residents=int(_num(data, "residents", 1)),
            temperature_preference=non_negative(data.get("temperaturePreference"), 21.0),
            building_era=coerce_era(data.get("buildingEra") or BuildingEra.PRE_1978),
            insulation_level=coerce_insulation(data.get("insulationLevel") or InsulationLevel.NONE),
            design_outdoor_temp_c=_opt(data, "designOutdoorTempC"),
            manual_design_outdoor_temp_c=_opt(data, "manualDesignOutdoorTempC"),
            design_outdoor_temp_meta=dict(data.get("designOutdoorTempMeta") or {}),
            airtightness_test_type=str(data.get("airtightnessTestType") or "none"),
            n50_value=_opt(data, "n50Value"),
            thermal_bridge_preset=data.get("thermalBridgePreset"),
            pv_heat_pump=PVHeatPumpSettings.from_dict(pv) if isinstance(pv, Mapping) else PVHeatPumpSettings(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "postalCode": self.postal_code,
            "location": self.location,
            "address": self.address,
            "buildingType": self.building_type,
            "constructionYear": self.construction_year,
            "floors": self.floors,
            "residents": self.residents,
            "temperaturePreference": self.temperature_preference,
            "buildingEra": self.building_era.value,
            "insulationLevel": self.insulation_level.value,
            "designOutdoorTempC": self.design_outdoor_temp_c,
            "manualDesignOutdoorTempC": self.manual_design_outdoor_temp_c,
            "designOutdoorTempMeta": dict(self.design_outdoor_temp_meta),
            "airtightnessTestType": self.airtightness_test_type,
            "n50Value": self.n50_value,
            "thermalBridgePreset": self.thermal_bridge_preset,
            "pvHeatPump": self.pv_heat_pump.to_dict(),
        }


@dataclass(frozen=True)
class Dimensioning:
    """Heat-pump sizing inputs."""

    heat_load_w: float = 0.0
    residents: int = 0
    dhw_per_resident_l_per_day: float = 0.0
    bivalence_temperature_c: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dimensioning":
        return cls(
            heat_load_w=_num(data, "heatLoadW"),
            residents=int(_num(data, "residents")),
            dhw_per_resident_l_per_day=_num(data, "dhwPerResidentLPerDay"),
            bivalence_temperature_c=_opt(data, "bivalenceTemperatureC"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heatLoadW": self.heat_load_w,
            "residents": self.residents,
            "dhwPerResidentLPerDay": self.dhw_per_resident_l_per_day,
            "bivalenceTemperatureC": self.bivalence_temperature_c,
        }


@dataclass(frozen=True)
class ProjectMeta:
    """
    Project-level calculation settings.

    Parameters
    ----------
    thermal_bridge_factor : Flat allowance on transmission (None → 5 %)
    intermittent_factor   : Load multiplier ≥ 1 for intermittent heating
    infiltration_ach      : Building-wide leakage rate               [1/h]
    """

    thermal_bridge_factor: Optional[float] = None
    intermittent_factor: Optional[float] = None
    infiltration_ach: Optional[float] = None
    planned_installation_date: Optional[str] = None
    electricity_price_ct: float = 20.0
    hp_tariff_enabled: bool = False
    dimensioning: Dimensioning = field(default_factory=Dimensioning)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectMeta":
        dim = data.get("dimensioning")
        tariff = data.get("tariff") if isinstance(data.get("tariff"), Mapping) else {}
        return cls(
            thermal_bridge_factor=_opt(data, "thermalBridgeFactor"),
            intermittent_factor=_opt(data, "intermittentFactor"),
            infiltration_ach=_opt(data, "infiltrationACH"),
            planned_installation_date=data.get("plannedInstallationDate"),
            electricity_price_ct=non_negative(tariff.get("electricityPriceCt"), 20.0),
            hp_tariff_enabled=bool(tariff.get("hpTariffEnabled", False)),
            dimensioning=Dimensioning.from_dict(dim) if isinstance(dim, Mapping) else Dimensioning(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thermalBridgeFactor": self.thermal_bridge_factor,
            "intermittentFactor": self.intermittent_factor,
            "infiltrationACH": self.infiltration_ach,
            "plannedInstallationDate": self.planned_installation_date,
            "tariff": {
                "electricityPriceCt": self.electricity_price_ct,
                "hpTariffEnabled": self.hp_tariff_enabled,
            },
            "dimensioning": self.dimensioning.to_dict(),
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _set_at(items: Tuple[Any, ...], index: int, value: Any) -> Tuple[Any, ...]:
    if not 0 <= index < len(items):
        raise IndexError(f"element index {index} out of range")
    return items[:index] + (value,) + items[index + 1:]


def with_room_fields(room: Room, **changes: Any) -> Room:
    """Copy of ``room`` with the given top-level fields replaced."""
    for key in ("walls", "windows", "doors", "heaters", "thermal_bridges"):
        if key in changes:
            changes[key] = tuple(changes[key])
    return replace(room, **changes)


def with_wall(room: Room, index: int, **changes: Any) -> Room:
    return replace(room, walls=_set_at(room.walls, index, replace(room.walls[index], **changes)))


def with_window(room: Room, index: int, **changes: Any) -> Room:
    return replace(room, windows=_set_at(room.windows, index, replace(room.windows[index], **changes)))


def with_door(room: Room, index: int, **changes: Any) -> Room:
    return replace(room, doors=_set_at(room.doors, index, replace(room.doors[index], **changes)))


def with_ceiling(room: Room, **changes: Any) -> Room:
    return replace(room, ceiling=replace(room.ceiling or CeilingConfig(), **changes))


def with_floor_config(room: Room, **changes: Any) -> Room:
    return replace(room, floor=replace(room.floor or FloorConfig(), **changes))


def with_ventilation(room: Room, **changes: Any) -> Room:
    return replace(room, ventilation=replace(room.ventilation or VentilationConfig(), **changes))


def add_element(room: Room, element: Any) -> Room:
    """Append a wall, window, door, heater or thermal bridge to its list."""
    attr = {
        Wall: "walls", Window: "windows", Door: "doors",
        Heater: "heaters", ThermalBridge: "thermal_bridges",
    }[type(element)]
    return replace(room, **{attr: getattr(room, attr) + (element,)})


def remove_element(room: Room, element_id: str) -> Room:
    """Drop any envelope element, heater or bridge with ``element_id``."""
    changes = {}
    for attr in ("walls", "windows", "doors", "heaters", "thermal_bridges"):
        items = getattr(room, attr)
        kept = tuple(e for e in items if e.id != element_id)
        if len(kept) != len(items):
            changes[attr] = kept
    return replace(room, **changes) if changes else room
