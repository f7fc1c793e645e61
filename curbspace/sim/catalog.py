from __future__ import annotations

"""
File: curbspace/sim/catalog.py
Purpose: Built-in reference tables for the loading-space model.
Key responsibilities:
- Vehicle, function, distribution and period catalogs.
- Delivery profiles keyed by function x distribution.
- Default scenario and period-distribution sanity warnings.
"""

from typing import Mapping, Sequence

from curbspace.sim.entities import DeliveryProfile, DistributionType, FunctionType, Period, VehicleType


MINUTES_PER_HOUR = 60

# Tolerance used when flagging period fractions that do not add up to 100%.
PERIOD_SUM_TOLERANCE = 0.02

VEHICLES: tuple[VehicleType, ...] = (
    VehicleType("V1", "Fiets, cargobike, scooter", 2),
    VehicleType("V2", "LEVV / personenwagen", 6),
    VehicleType("V3", "Bestelwagen <3,5 ton (N1)", 8),
    VehicleType("V4", "Vrachtwagen (N2)", 11),
    VehicleType("V5", "Grote vrachtwagen (N3)", 16),
    VehicleType("V6", "Service bestelwagen", 8),
)

FUNCTIONS: tuple[FunctionType, ...] = (
    FunctionType("F1", "Woningen", "woningen",
                 "Consumenten die samen een woning en huishouding delen en die als 1 afleveradres worden geteld."),
    FunctionType("F2", "Supermarkt", "vestigingen", "Standaard supermarkt zonder laad- en losruimte op eigen terrein."),
    FunctionType("F3", "Retail Food", "vestigingen", "Winkels zoals bakkerijen, viswinkels, kaaswinkels, natuurvoeding."),
    FunctionType("F4", "Retail Winkels (Keten)", "vestigingen", "Retail keten voor mode, huishoudelijke artikelen, electronica."),
    FunctionType("F5", "Retail Winkels (Onafh.)", "vestigingen", "Onafhankelijke boekenwinkel, electronicazaak, etc."),
    FunctionType("F6", "Restaurant (High-end)", "vestigingen", "Gastronomisch restaurant (high en middle class)."),
    FunctionType("F7", "Restaurant (Basis)", "vestigingen", "Basis restaurant."),
    FunctionType("F8", "Café", "vestigingen", "Café."),
    FunctionType("F9", "Hotel", "vestigingen", "Hotel (met of zonder restaurant)."),
    FunctionType("F10", "Kantoor (Klein)", "vestigingen", "Kantoren tot 2500 m² BVO."),
    FunctionType("F11", "Kantoor (Middel)", "vestigingen", "Kantoren tussen 2500 m² en 10.000 m² BVO."),
    FunctionType("F12", "Kantoor (Groot)", "vestigingen", "Kantoren vanaf 10.000 m² met meerdere huurders."),
)

DISTRIBUTIONS: tuple[DistributionType, ...] = (
    DistributionType("D1", "Afval - Bedrijven", 6),
    DistributionType("D2", "Afval - Huishoudens", 5),
    DistributionType("D3", "Bouw - Renovatie", 6),
    DistributionType("D4", "Bouw - Nieuwbouw", 6),
    DistributionType("D5", "Facilitair (bevoorrading)", 5),
    DistributionType("D6", "Horeca / Groothandel", 6),
    DistributionType("D7", "Pakket", 6),
    DistributionType("D8", "Retail (keten)", 6),
    DistributionType("D9", "Retail (onafhankelijk)", 5),
    DistributionType("D10", "Service & Onderhoud", 5),
    DistributionType("D11", "Specialisten", 6),
    DistributionType("D12", "Supermarktleveringen", 5),
    DistributionType("D13", "Thuisbezorging boodschappen", 7),
    DistributionType("D14", "Tweemans thuisbelevering", 6),
    DistributionType("D15", "Verhuizingen", 7),
)

PERIODS: tuple[Period, ...] = (
    Period("P1", "0:00 - 6:00", 6),
    Period("P2", "6:00 - 12:00", 6),
    Period("P3", "12:00 - 18:00", 6),
    Period("P4", "18:00 - 0:00", 6),
)

DEFAULT_CLUSTERS: dict[str, int] = {"V1": 1, "V2": 1, "V3": 2, "V4": 2, "V5": 2, "V6": 3}

DEFAULT_CLUSTER_SERVICE_LEVELS: dict[int, float] = {1: 0.95, 2: 0.95, 3: 0.95}

DEFAULT_FUNCTION_COUNTS: dict[str, int] = {
    "F1": 362,
    "F2": 0,
    "F3": 9,
    "F4": 2,
    "F5": 27,
    "F6": 0,
    "F7": 8,
    "F8": 7,
    "F9": 0,
    "F10": 0,
    "F11": 0,
    "F12": 0,
}


def profile_key(function_id: str, distribution_id: str) -> str:
    """Key under which a function x distribution profile is registered."""
    return f"{function_id}_{distribution_id}"


_Z = (0, 0, 0, 0)
_MORNING_AFTERNOON = (0, 0.5, 0.5, 0)
_DAYTIME_PARCEL = (0, 0.4, 0.4, 0.2)
_MORNING_HEAVY = (0, 0.7, 0.2, 0.1)
_MORNING_ONLY = (0, 0.7, 0.3, 0)
_HOTEL = (0, 0.5, 0.4, 0.1)


def _profile(
    stops: Sequence[float],
    duration: Sequence[float],
    fractions: Sequence[Sequence[float]],
) -> DeliveryProfile:
    return DeliveryProfile(
        stops_per_week_per_unit=tuple(float(s) for s in stops),
        duration=tuple(float(d) for d in duration),
        period_distribution=tuple(tuple(float(f) for f in row) for row in fractions),
    )


def _service_visit(stops: float, duration: float) -> DeliveryProfile:
    """Service & maintenance profile served by the service van (V6) only."""
    return _profile(
        [0, 0, 0, 0, 0, stops],
        [0, 0, 0, 0, 0, duration],
        [_Z, _Z, _Z, _Z, _Z, _MORNING_AFTERNOON],
    )


_INACTIVE = _profile([0] * 6, [0] * 6, [_Z] * 6)

DELIVERY_PROFILES: dict[str, DeliveryProfile] = {
    # Woningen
    "F1_D7": _profile([0, 0, 1.426282, 0, 0, 0], [0, 0, 2, 0, 0, 0], [_Z, _Z, _DAYTIME_PARCEL, _Z, _Z, _Z]),
    "F1_D10": _service_visit(0.038462, 60),
    "F1_D13": _profile([0, 0, 0.06, 0, 0, 0], [0, 0, 8, 0, 0, 0], [_Z, _Z, (0, 0.3, 0.3, 0.4), _Z, _Z, _Z]),
    "F1_D14": _profile(
        [0, 0, 0.013736, 0.013736, 0, 0],
        [0, 0, 20, 20, 0, 0],
        [_Z, _Z, _DAYTIME_PARCEL, _DAYTIME_PARCEL, _Z, _Z],
    ),
    # Supermarkt
    "F2_D10": _profile(
        [0, 1, 0, 0, 0, 1],
        [0, 15, 0, 0, 0, 60],
        [_Z, _MORNING_AFTERNOON, _Z, _Z, _Z, _MORNING_AFTERNOON],
    ),
    "F2_D12": _profile(
        [0, 0, 0, 4.25, 12.75, 0],
        [0, 0, 0, 30, 45, 0],
        [_Z, _Z, _Z, _MORNING_HEAVY, _MORNING_HEAVY, _Z],
    ),
    # Retail Food
    "F3_D10": _service_visit(0.038462, 60),
    "F3_D11": _profile(
        [0, 2.5, 2.5, 2.5, 0, 0],
        [0, 15, 15, 15, 0, 0],
        [_Z, _MORNING_ONLY, _MORNING_ONLY, _MORNING_ONLY, _Z, _Z],
    ),
    # Retail Winkels (Keten)
    "F4_D8": _profile(
        [0, 0, 0, 3.6, 0.9, 0],
        [0, 0, 0, 40, 40, 0],
        [_Z, _Z, _Z, _MORNING_HEAVY, _MORNING_HEAVY, _Z],
    ),
    "F4_D10": _service_visit(1, 45),
    # Retail Winkels (Onafh.)
    "F5_D7": _INACTIVE,
    "F5_D9": _profile(
        [0, 0, 5, 4, 1, 0],
        [0, 0, 15, 15, 15, 0],
        [_Z, _Z, _MORNING_HEAVY, _MORNING_HEAVY, _MORNING_HEAVY, _Z],
    ),
    "F5_D10": _service_visit(0.038462, 60),
    # Restaurant (High-end)
    "F6_D6": _profile([0, 0, 0, 11.5, 0, 0], [0, 0, 0, 15, 0, 0], [_Z, _Z, _Z, _MORNING_ONLY, _Z, _Z]),
    "F6_D10": _service_visit(0.346154, 60),
    "F6_D11": _profile([0, 0, 11.5, 0, 0, 0], [0, 0, 15, 0, 0, 0], [_Z, _Z, _MORNING_ONLY, _Z, _Z, _Z]),
    # Restaurant (Basis)
    "F7_D6": _profile([0, 0, 0, 4.8, 0, 0], [0, 0, 0, 15, 0, 0], [_Z, _Z, _Z, _MORNING_ONLY, _Z, _Z]),
    "F7_D10": _service_visit(0.346154, 60),
    "F7_D11": _profile([0, 0, 0, 0.8, 0, 0], [0, 0, 0, 15, 0, 0], [_Z, _Z, _Z, _MORNING_ONLY, _Z, _Z]),
    # Café
    "F8_D6": _profile([0, 0, 0, 4, 0, 0], [0, 0, 0, 30, 0, 0], [_Z, _Z, _Z, _MORNING_ONLY, _Z, _Z]),
    "F8_D10": _service_visit(0.346154, 60),
    "F8_D11": _INACTIVE,
    # Hotel
    "F9_D6": _profile([0, 0, 0, 3.4, 0, 0], [0, 0, 0, 15, 0, 0], [_Z, _Z, _Z, _HOTEL, _Z, _Z]),
    "F9_D7": _profile([0, 0, 10, 0, 0, 0], [0, 0, 2, 0, 0, 0], [_Z, _Z, _DAYTIME_PARCEL, _Z, _Z, _Z]),
    "F9_D10": _service_visit(2, 60),
    "F9_D11": _profile(
        [0, 0.425, 13.175, 2, 0, 0],
        [0, 15, 10, 30, 0, 0],
        [_Z, _HOTEL, _HOTEL, _HOTEL, _Z, _Z],
    ),
    # Kantoor (Klein)
    "F10_D5": _profile([0, 0, 2.1, 0, 0, 0], [0, 0, 5, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    "F10_D7": _profile([0, 0, 5.7, 0, 0, 0], [0, 0, 2, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    "F10_D10": _service_visit(0.038462, 60),
    "F10_D11": _profile([0, 0, 2.75, 0, 0, 0], [0, 0, 5, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    # Kantoor (Middel)
    "F11_D5": _profile(
        [0, 0, 2.52, 1.68, 0, 0],
        [0, 0, 10, 10, 0, 0],
        [_Z, _Z, _MORNING_AFTERNOON, _MORNING_AFTERNOON, _Z, _Z],
    ),
    "F11_D6": _profile([0, 0, 0, 3.68, 0, 0], [0, 0, 0, 10, 0, 0], [_Z, _Z, _Z, _MORNING_AFTERNOON, _Z, _Z]),
    "F11_D7": _profile([0, 0, 11.4, 0, 0, 0], [0, 0, 5, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    "F11_D10": _profile(
        [0, 0, 0, 1.3, 0, 3.7],
        [0, 0, 0, 30, 0, 30],
        [_Z, _Z, _Z, _MORNING_AFTERNOON, _Z, _MORNING_AFTERNOON],
    ),
    "F11_D11": _profile([0, 0, 5.52, 0, 0, 0], [0, 0, 10, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    # Kantoor (Groot)
    "F12_D5": _profile(
        [0, 0, 13.26, 8.84, 0, 0],
        [0, 0, 15, 20, 0, 0],
        [_Z, _Z, _MORNING_AFTERNOON, _MORNING_AFTERNOON, _Z, _Z],
    ),
    "F12_D6": _profile([0, 0, 0, 16.16, 0, 0], [0, 0, 0, 20, 0, 0], [_Z, _Z, _Z, _MORNING_AFTERNOON, _Z, _Z]),
    "F12_D7": _profile([0, 0, 41.9, 0, 0, 0], [0, 0, 5, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
    "F12_D10": _profile(
        [0, 0, 0, 3.28, 0, 9],
        [0, 0, 0, 30, 0, 30],
        [_Z, _Z, _Z, _MORNING_AFTERNOON, _Z, _MORNING_AFTERNOON],
    ),
    "F12_D11": _profile([0, 0, 24.24, 0, 0, 0], [0, 0, 15, 0, 0, 0], [_Z, _Z, _MORNING_AFTERNOON, _Z, _Z, _Z]),
}

PROFILE_METADATA: dict[str, dict[str, str]] = {
    "F1_D7": {"description": "Pakketleveringen aan woningen", "remarks": "Eén bestelwagen per afleveradres."},
    "F1_D10": {"description": "Service & onderhoud aan woningen", "remarks": "Loodgieter, elektricien, etc."},
    "F1_D13": {"description": "Thuisbezorging boodschappen", "remarks": "Online supermarkt bestellingen."},
    "F1_D14": {"description": "Tweemans thuisbelevering", "remarks": "Grote items (meubels, witgoed)."},
    "F2_D10": {"description": "Service & onderhoud supermarkt", "remarks": ""},
    "F2_D12": {"description": "Supermarktleveringen", "remarks": "Reguliere bevoorrading."},
    "F3_D10": {"description": "Service & onderhoud retail food", "remarks": ""},
    "F3_D11": {"description": "Specialisten retail food", "remarks": "Versproducten, bakkerij, etc."},
    "F4_D8": {"description": "Retail keten bevoorrading", "remarks": ""},
    "F4_D10": {"description": "Service & onderhoud retail keten", "remarks": ""},
    "F5_D7": {"description": "Pakketleveringen retail onafh.", "remarks": "Profiel zonder actieve voertuigen."},
    "F5_D9": {"description": "Retail onafhankelijk bevoorrading", "remarks": ""},
    "F5_D10": {"description": "Service & onderhoud retail onafh.", "remarks": ""},
    "F6_D6": {"description": "Horeca/groothandel restaurant high-end", "remarks": ""},
    "F6_D10": {"description": "Service & onderhoud restaurant high-end", "remarks": ""},
    "F6_D11": {"description": "Specialisten restaurant high-end", "remarks": ""},
    "F7_D6": {"description": "Horeca/groothandel restaurant basis", "remarks": ""},
    "F7_D10": {"description": "Service & onderhoud restaurant basis", "remarks": ""},
    "F7_D11": {"description": "Specialisten restaurant basis", "remarks": ""},
    "F8_D6": {"description": "Horeca/groothandel café", "remarks": ""},
    "F8_D10": {"description": "Service & onderhoud café", "remarks": ""},
    "F8_D11": {"description": "Specialisten café", "remarks": "Profiel zonder actieve voertuigen."},
    "F9_D6": {"description": "Horeca/groothandel hotel", "remarks": ""},
    "F9_D7": {"description": "Pakketleveringen hotel", "remarks": ""},
    "F9_D10": {"description": "Service & onderhoud hotel", "remarks": ""},
    "F9_D11": {"description": "Specialisten hotel", "remarks": ""},
    "F10_D5": {"description": "Facilitair kantoor klein", "remarks": ""},
    "F10_D7": {"description": "Pakketleveringen kantoor klein", "remarks": ""},
    "F10_D10": {"description": "Service & onderhoud kantoor klein", "remarks": ""},
    "F10_D11": {"description": "Specialisten kantoor klein", "remarks": ""},
    "F11_D5": {"description": "Facilitair kantoor middel", "remarks": ""},
    "F11_D6": {"description": "Horeca/groothandel kantoor middel", "remarks": ""},
    "F11_D7": {"description": "Pakketleveringen kantoor middel", "remarks": ""},
    "F11_D10": {"description": "Service & onderhoud kantoor middel", "remarks": ""},
    "F11_D11": {"description": "Specialisten kantoor middel", "remarks": ""},
    "F12_D5": {"description": "Facilitair kantoor groot", "remarks": ""},
    "F12_D6": {"description": "Horeca/groothandel kantoor groot", "remarks": ""},
    "F12_D7": {"description": "Pakketleveringen kantoor groot", "remarks": ""},
    "F12_D10": {"description": "Service & onderhoud kantoor groot", "remarks": ""},
    "F12_D11": {"description": "Specialisten kantoor groot", "remarks": ""},
}


def period_distribution_warnings(
    profiles: Mapping[str, DeliveryProfile],
    vehicles: Sequence[VehicleType],
    num_periods: int = len(PERIODS),
) -> list[dict[str, object]]:
    """Flag active vehicle entries whose period fractions do not sum to 1.

    Fractions are reported, never normalized; the engine uses them as given.
    """
    warnings: list[dict[str, object]] = []
    for key in sorted(profiles):
        profile = profiles[key]
        for idx, vehicle in enumerate(vehicles):
            if profile.stops_for(idx) == 0:
                continue
            total = sum(profile.fractions_for(idx, num_periods))
            if total > 0 and abs(total - 1) > PERIOD_SUM_TOLERANCE:
                warnings.append(
                    {
                        "profile": key,
                        "vehicle_id": vehicle.id,
                        "fraction_sum": round(total, 4),
                    }
                )
    return warnings
