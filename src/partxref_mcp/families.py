"""Component family resolution.

This module provides:
- SUBCATEGORY_FAMILIES: Maps subcategory names (case-insensitive) to base family ids
- resolve_family(): Resolves a subcategory, then refines it with classify_family()
- classify_family(): Detects variant families from part attributes
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from .logic_tables import LOGIC_TABLES
from .models import PartAttributes
from .values import parse_quantity

logger = logging.getLogger(__name__)


# Subcategory -> base family id. Variant families (e.g. current sense resistors)
# are also reachable from their base family via classify_family().
SUBCATEGORY_FAMILIES: dict[str, str] = {
    # ==========================================================================
    # MLCC (12)
    # ==========================================================================
    "mlcc": "12",
    "ceramic": "12",
    "multilayer ceramic": "12",
    "ceramic capacitor": "12",
    "ceramic capacitors": "12",
    "multilayer ceramic capacitors mlcc - smd/smt": "12",
    # ==========================================================================
    # MICA (13)
    # ==========================================================================
    "mica capacitor": "13",
    "silver mica": "13",
    "mica": "13",
    # ==========================================================================
    # RESISTORS (52, 53, 54, 55)
    # ==========================================================================
    "chip resistor": "52",
    "thick film": "52",
    "thin film": "52",
    "resistor": "52",
    "chip resistor - surface mount": "52",
    "through hole resistor": "53",
    "axial resistor": "53",
    "current sense resistor": "54",
    "current sense": "54",
    "chassis mount resistor": "55",
    "power resistor": "55",
    # ==========================================================================
    # ALUMINUM CAPACITORS (58, 60)
    # ==========================================================================
    "aluminum electrolytic": "58",
    "electrolytic": "58",
    "aluminum polymer": "60",
    "polymer capacitor": "60",
    # ==========================================================================
    # CIRCUIT PROTECTION (65, 66)
    # ==========================================================================
    "varistor": "65",
    "mov": "65",
    "metal oxide varistor": "65",
    "tvs - varistor": "65",
    "ptc resettable fuse": "66",
    "resettable fuse": "66",
    "polymeric ptc": "66",
    "polyswitch": "66",
    "pptc": "66",
    # ==========================================================================
    # MAGNETICS (70, 71, 72)
    # ==========================================================================
    "ferrite bead": "70",
    "ferrite": "70",
    "ferrite bead and chip": "70",
    "power inductor": "71",
    "inductor": "71",
    "shielded inductor": "71",
    "fixed inductor": "71",
    "rf inductor": "72",
    "signal inductor": "72",
    "rf choke": "72",
    # ==========================================================================
    # DIODES (B1, B2, B3, B4)
    # ==========================================================================
    "rectifier diode": "B1",
    "rectifier": "B1",
    "diode - rectifier": "B1",
    "diodes - rectifiers - single": "B1",
    "diodes - rectifiers - array": "B1",
    "diodes - bridge rectifiers": "B1",
    "fast recovery diode": "B1",
    "ultrafast recovery diode": "B1",
    "standard recovery diode": "B1",
    "recovery rectifier": "B1",
    "schottky diode": "B2",
    "schottky diodes": "B2",
    "schottky rectifier": "B2",
    "schottky barrier diodes (sbd)": "B2",
    "diodes - schottky": "B2",
    "sic schottky diode": "B2",
    "zener": "B3",
    "zener diode": "B3",
    "diodes - zener - single": "B3",
    "voltage reference diode": "B3",
    "tvs diode": "B4",
    "tvs - diodes": "B4",
    "transient voltage suppressor": "B4",
    "esd protection diode": "B4",
    # ==========================================================================
    # TRANSISTORS AND THYRISTORS (B5, B6, B7, B8, B9)
    # ==========================================================================
    "mosfet": "B5",
    "mosfets": "B5",
    "single fets, mosfets": "B5",
    "transistors - fets, mosfets - single": "B5",
    "bjt": "B6",
    "bipolar transistor": "B6",
    "transistors - bipolar (bjt) - single": "B6",
    "igbt": "B7",
    "transistors - igbts - single": "B7",
    "thyristor": "B8",
    "thyristors - scrs": "B8",
    "thyristors - triacs": "B8",
    "silicon controlled rectifier": "B8",
    "triac": "B8",
    "jfet": "B9",
    "transistors - jfets": "B9",
    # ==========================================================================
    # POWER MANAGEMENT (C1, C2, C3)
    # ==========================================================================
    "ldo": "C1",
    "ldo regulator": "C1",
    "linear voltage regulators (ldo)": "C1",
    "voltage regulators - linear, low drop out (ldo) regulators": "C1",
    "switching regulator": "C2",
    "dc-dc converter": "C2",
    "dc dc converter": "C2",
    "buck converter": "C2",
    "boost converter": "C2",
    "voltage regulators - dc dc switching regulators": "C2",
    "dc dc switching controller": "C2",
    "gate driver": "C3",
    "gate drivers": "C3",
    "gate drivers - isolated": "C3",
    "isolated gate drivers": "C3",
    # ==========================================================================
    # ANALOG AND LOGIC (C4, C5)
    # ==========================================================================
    "op amp": "C4",
    "op-amp": "C4",
    "operational amplifier": "C4",
    "comparator": "C4",
    "instrumentation amplifier": "C4",
    "instrumentation, op amps, buffer amps": "C4",
    "logic gate": "C5",
    "gates and inverters": "C5",
    "logic - gates and inverters": "C5",
    "logic - buffers, drivers, receivers, transceivers": "C5",
    "logic - flip flops": "C5",
    "flip flop": "C5",
    "standard logic": "C5",
}


@dataclass(frozen=True)
class ClassifierRule:
    variant_family_id: str
    base_family_id: str
    matches: Callable[[PartAttributes], bool]


_SENSE_WORDING = re.compile(r"current sense|current sensing|4-terminal|four terminal|kelvin", re.IGNORECASE)
_POWER_PACKAGE = re.compile(r"TO-220|TO-247|TO-263|D.?PAK", re.IGNORECASE)
_SMD_CHIP_CODE = re.compile(r"^(0[1-9]\d{2}|1[0-9]\d{2}|2[0-5]\d{2})$")
_RF_WORD = re.compile(r"\brf\b", re.IGNORECASE)

# Below this an inductor is in the nanohenry range typical of RF parts
RF_INDUCTANCE_LIMIT = 1e-6


def _numeric(attrs: PartAttributes, attribute_id: str) -> float | None:
    param = attrs.get(attribute_id)
    if param is None:
        return None
    return param.numeric_value if param.numeric_value is not None else parse_quantity(param.value)


def _text(attrs: PartAttributes, attribute_id: str) -> str:
    param = attrs.get(attribute_id)
    return param.value.lower() if param is not None else ""


def _is_current_sense(attrs: PartAttributes) -> bool:
    """Very low resistance plus sensing wording in the description."""
    resistance = _numeric(attrs, "resistance")
    return resistance is not None and resistance <= 1 and bool(_SENSE_WORDING.search(attrs.part.description))


def _is_chassis_mount(attrs: PartAttributes) -> bool:
    """Power package, chassis wording, or 5W and up outside an SMD chip size."""
    package = _text(attrs, "package_case")
    if _POWER_PACKAGE.search(package):
        return True
    description = attrs.part.description.lower()
    if "chassis mount" in description or "chassis-mount" in description:
        return True
    power = _numeric(attrs, "power_rating")
    return power is not None and power >= 5 and not _SMD_CHIP_CODE.match(re.sub(r"\s", "", package))


def _is_through_hole(attrs: PartAttributes) -> bool:
    text = f"{_text(attrs, 'mounting_type')} {attrs.part.description.lower()}"
    return "through hole" in text or "axial" in text


def _is_polymer(attrs: PartAttributes) -> bool:
    description = attrs.part.description.lower()
    subcategory = attrs.part.subcategory.lower()
    return ("polymer" in description or "polymer" in subcategory) and "tantalum" not in description


def _is_mica(attrs: PartAttributes) -> bool:
    return "mica" in attrs.part.description.lower() or "mica" in _text(attrs, "dielectric")


def _is_rf_inductor(attrs: PartAttributes) -> bool:
    """RF wording, or a sub-microhenry part that publishes Q or SRF."""
    subcategory = attrs.part.subcategory.lower()
    if _RF_WORD.search(attrs.part.description) or _RF_WORD.search(subcategory) or "signal" in subcategory:
        return True
    inductance = _numeric(attrs, "inductance")
    has_rf_specs = attrs.get("q_factor") is not None or attrs.get("srf") is not None
    return inductance is not None and inductance < RF_INDUCTANCE_LIMIT and has_rf_specs


# Ordered most-specific-first within each base family
CLASSIFIER_RULES: list[ClassifierRule] = [
    ClassifierRule("54", "52", _is_current_sense),
    ClassifierRule("55", "52", _is_chassis_mount),
    ClassifierRule("53", "52", _is_through_hole),
    ClassifierRule("60", "58", _is_polymer),
    ClassifierRule("13", "12", _is_mica),
    ClassifierRule("72", "71", _is_rf_inductor),
]


def classify_family(base_family_id: str, attrs: PartAttributes) -> str:
    """Return the variant family id the attributes indicate, else the base id."""
    for rule in CLASSIFIER_RULES:
        if rule.base_family_id == base_family_id and rule.matches(attrs):
            logger.debug(f"Classified {attrs.mpn} as family {rule.variant_family_id} (base {base_family_id})")
            return rule.variant_family_id
    return base_family_id


def resolve_subcategory(subcategory: str | None) -> str | None:
    """Resolve a subcategory name to a base family id.

    Matching priority:
    1. Exact match (case-insensitive)
    2. Longest known name contained in the subcategory
       (e.g. "Schottky Diodes & Rectifiers" -> "schottky diode")
    """
    if not subcategory:
        return None
    name_lower = subcategory.strip().lower()

    if name_lower in SUBCATEGORY_FAMILIES:
        return SUBCATEGORY_FAMILIES[name_lower]

    matches = [known for known in SUBCATEGORY_FAMILIES if known in name_lower]
    if not matches:
        return None
    matches.sort(key=len, reverse=True)
    return SUBCATEGORY_FAMILIES[matches[0]]


def resolve_family(subcategory: str | None, attrs: PartAttributes | None = None) -> str | None:
    """Resolve the family id for a part, detecting variant families when attributes are given."""
    base_family_id = resolve_subcategory(subcategory)
    if base_family_id is None:
        return None
    if attrs is not None:
        return classify_family(base_family_id, attrs)
    return base_family_id


def is_family_supported(subcategory: str | None) -> bool:
    return resolve_subcategory(subcategory) is not None


def get_supported_family_names() -> list[str]:
    return list(dict.fromkeys(t.family_name for t in LOGIC_TABLES.values()))
