"""Attribute rule tables per component family.

Tables are declarative reference data keyed by family id. Tier defaults follow
the weight: 10 is mandatory, 8-9 primary, anything lower secondary. Variant
families are derived from a base table with build_derived_table().
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from .models import AttributeRule, LogicTable, LogicType, ThresholdDirection, Tier


def tier_for_weight(weight: int) -> Tier:
    if weight >= 10:
        return Tier.MANDATORY
    if weight >= 8:
        return Tier.PRIMARY
    return Tier.SECONDARY


def _rule(
    attribute_id: str,
    name: str,
    logic_type: LogicType,
    weight: int,
    direction: ThresholdDirection | None = None,
    *,
    tier: Tier | None = None,
    hierarchy: tuple[str, ...] = (),
    tolerance: float | None = None,
    review_band: float | None = None,
    block_on_missing: bool = False,
    reason: str = "",
) -> AttributeRule:
    return AttributeRule(
        attribute_id=attribute_id,
        attribute_name=name,
        logic_type=logic_type,
        base_tier=tier if tier is not None else tier_for_weight(weight),
        base_weight=weight,
        direction=direction,
        upgrade_hierarchy=hierarchy,
        tolerance=tolerance,
        review_band=review_band,
        block_on_missing=block_on_missing,
        engineering_reason=reason,
    )


def _table(family_id: str, family_name: str, category: str, description: str, rules: list[AttributeRule]) -> LogicTable:
    """Assemble a table, numbering rules in declaration order."""
    numbered = tuple(dataclasses.replace(r, sort_order=i) for i, r in enumerate(rules, start=1))
    return LogicTable(family_id, family_name, category, description, numbered)


# =============================================================================
# DERIVED TABLES
# =============================================================================


@dataclass(frozen=True)
class TableDelta:
    """Changes that turn a base family table into a variant family table."""
    family_id: str
    family_name: str
    category: str
    description: str
    remove: tuple[str, ...] = ()
    override: dict[str, dict[str, Any]] = field(default_factory=dict)  # attribute_id -> changed fields
    add: tuple[AttributeRule, ...] = ()


def build_derived_table(base: LogicTable, delta: TableDelta) -> LogicTable:
    """Apply REMOVE, then OVERRIDE, then ADD. The base table is never mutated.

    Overrides for attributes not present after removal are skipped. Added rules
    are numbered after the last remaining base rule.
    """
    removed = set(delta.remove)
    rules = [r for r in base.rules if r.attribute_id not in removed]

    for i, rule in enumerate(rules):
        changes = delta.override.get(rule.attribute_id)
        if changes:
            rules[i] = dataclasses.replace(rule, **changes)

    next_order = max((r.sort_order for r in rules), default=0) + 1
    for offset, rule in enumerate(delta.add):
        rules.append(dataclasses.replace(rule, sort_order=rule.sort_order or next_order + offset))

    return LogicTable(delta.family_id, delta.family_name, delta.category, delta.description, tuple(rules))


# =============================================================================
# PASSIVES
# =============================================================================

MLCC_DIELECTRIC_HIERARCHY = ("C0G/NP0", "X8R", "X7R", "X7S", "X6S", "X5R", "Y5V")

MLCC = _table("12", "MLCC Capacitors", "Passives", "Multilayer ceramic chip capacitors", [
    _rule("capacitance", "Capacitance", "fit", 10, tolerance=0.10, review_band=0.20,
          reason="Nominal capacitance sets filter corners and decoupling impedance"),
    _rule("package_case", "Package / Case", "identity", 10,
          reason="Footprint must match the existing PCB land pattern"),
    _rule("dielectric", "Dielectric / Temperature Characteristic", "identity_upgrade", 7,
          hierarchy=MLCC_DIELECTRIC_HIERARCHY,
          reason="Class I (C0G/NP0) is stable over voltage and temperature; Class II loses capacitance under DC bias"),
    _rule("voltage_rated", "Voltage Rating", "threshold", 10, "gte",
          reason="Replacement must withstand at least the original rated voltage"),
    _rule("tolerance", "Tolerance", "threshold", 6, "lte"),
    _rule("dc_bias_derating", "DC Bias Derating", "threshold", 5, "lte",
          reason="Capacitance loss at operating voltage; larger loss is worse"),
    _rule("flexible_termination", "Flexible Termination", "identity_flag", 5),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("height", "Height (Seated Max)", "threshold", 5, "lte"),
    _rule("msl", "Moisture Sensitivity Level", "threshold", 3, "lte"),
])

CHIP_RESISTORS = _table("52", "Chip Resistors", "Passives", "Thick and thin film surface-mount chip resistors", [
    _rule("resistance", "Resistance", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("tolerance", "Tolerance", "threshold", 7, "lte"),
    _rule("power_rating", "Power Rating", "threshold", 9, "gte"),
    _rule("voltage_rated", "Voltage Rating", "threshold", 8, "gte"),
    _rule("tcr", "Temperature Coefficient (TCR)", "threshold", 6, "lte"),
    _rule("composition", "Composition / Technology", "identity_upgrade", 5, hierarchy=("Thin Film", "Thick Film")),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("msl", "Moisture Sensitivity Level", "threshold", 3, "lte"),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
    _rule("anti_sulfur", "Anti-Sulfur", "identity_flag", 7),
])

CURRENT_SENSE_RESISTORS = build_derived_table(CHIP_RESISTORS, TableDelta(
    family_id="54",
    family_name="Current Sense Resistors",
    category="Passives",
    description="Derived from chip resistors with tightened precision and current-sensing additions",
    override={
        "tolerance": {
            "base_weight": 9,
            "base_tier": Tier.PRIMARY,
            "engineering_reason": "Current sense resistors require tight tolerance for accurate measurement",
        },
        "tcr": {
            "base_weight": 8,
            "base_tier": Tier.PRIMARY,
            "engineering_reason": "Low TCR keeps the measurement stable over temperature",
        },
    },
    add=(
        _rule("kelvin_sensing", "Kelvin (4-Terminal) Sensing", "identity_flag", 8),
        _rule("power_rating_pulse", "Pulse Power Rating", "threshold", 7, "gte"),
        _rule("parasitic_inductance", "Parasitic Inductance", "threshold", 5, "lte"),
        _rule("long_term_stability", "Long-Term Stability (Drift)", "threshold", 5, "lte"),
    ),
))

THROUGH_HOLE_RESISTORS = build_derived_table(CHIP_RESISTORS, TableDelta(
    family_id="53",
    family_name="Through-Hole Resistors",
    category="Passives",
    description="Derived from chip resistors with through-hole mounting additions",
    add=(
        _rule("lead_spacing", "Lead Spacing / Pitch", "identity", 7,
              reason="Lead pitch must fit the existing PCB holes"),
        _rule("mounting_style", "Mounting Style (Axial / Radial)", "identity", 9),
        _rule("body_dimensions", "Body Dimensions", "fit", 5),
    ),
))

CHASSIS_MOUNT_RESISTORS = build_derived_table(CHIP_RESISTORS, TableDelta(
    family_id="55",
    family_name="Chassis Mount / High Power Resistors",
    category="Passives",
    description="Derived from chip resistors with high-power mounting and thermal additions",
    override={
        "power_rating": {
            "base_weight": 10,
            "base_tier": Tier.MANDATORY,
            "engineering_reason": "High-power resistors are chosen for their dissipation rating first",
        },
    },
    add=(
        _rule("mounting_style", "Mounting Style", "identity", 9),
        _rule("thermal_resistance", "Thermal Resistance to Heatsink", "threshold", 7, "lte"),
        _rule("heatsink_dimensions", "Heatsink Interface / Bolt Pattern", "fit", 8,
              reason="Tab and bolt pattern must match the existing heatsink or chassis drilling"),
    ),
))

MICA_CAPACITORS = build_derived_table(MLCC, TableDelta(
    family_id="13",
    family_name="Mica Capacitors (Silver Mica)",
    category="Passives",
    description="Derived from MLCC with mica-specific simplifications for precision applications",
    remove=("dc_bias_derating", "flexible_termination"),
    override={
        "dielectric": {
            "attribute_name": "Dielectric Material",
            "logic_type": "identity",
            "upgrade_hierarchy": (),
            "engineering_reason": "Mica is a single stable dielectric; there is no class hierarchy",
        },
        "tolerance": {
            "engineering_reason": "Mica parts are picked for precision, typically 1% or better",
        },
    },
    add=(
        _rule("temperature_coefficient", "Temperature Coefficient", "threshold", 7, "lte"),
        _rule("mil_spec", "MIL-Spec Compliance", "identity_flag", 6),
    ),
))

ALUMINUM_ELECTROLYTIC = _table("58", "Aluminum Electrolytic Capacitors", "Passives", "Wet aluminum electrolytic capacitors, radial and SMD can", [
    _rule("capacitance", "Capacitance", "fit", 10, tolerance=0.20, review_band=0.30,
          reason="Electrolytic tolerance is typically ±20%"),
    _rule("voltage_rated", "Voltage Rating", "threshold", 10, "gte"),
    _rule("package_case", "Package / Case (Diameter x Height)", "identity", 10),
    _rule("lead_spacing", "Lead Spacing", "identity", 8),
    _rule("polarization", "Polarization", "identity", 9,
          reason="Bipolar parts survive reverse bias; polar parts do not"),
    _rule("esr", "ESR", "threshold", 7, "lte"),
    _rule("ripple_current", "Ripple Current", "threshold", 8, "gte"),
    _rule("lifetime", "Rated Lifetime at Temperature", "threshold", 7, "gte"),
    _rule("tolerance", "Tolerance", "threshold", 5, "lte"),
    _rule("leakage_current", "Leakage Current", "threshold", 5, "lte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("height", "Height (Seated Max)", "threshold", 5, "lte"),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
])

ALUMINUM_POLYMER = build_derived_table(ALUMINUM_ELECTROLYTIC, TableDelta(
    family_id="60",
    family_name="Aluminum Polymer Capacitors",
    category="Passives",
    description="Derived from aluminum electrolytic with solid polymer-specific modifications",
    remove=("lifetime",),
    override={
        "esr": {"base_weight": 9, "base_tier": Tier.PRIMARY,
                "engineering_reason": "Low ESR is usually why a polymer part was chosen"},
        "ripple_current": {"base_weight": 9, "base_tier": Tier.PRIMARY},
    },
    add=(
        _rule("polymer_type", "Polymer Type (Solid / Hybrid)", "identity", 5),
    ),
))

VARISTORS = _table("65", "Varistors / Metal Oxide Varistors (MOVs)", "Passives", "Metal oxide varistors for surge and transient suppression", [
    _rule("varistor_voltage", "Varistor Voltage (V1mA)", "identity", 10),
    _rule("clamping_voltage", "Clamping Voltage", "threshold", 9, "lte"),
    _rule("max_continuous_voltage", "Max Continuous Voltage (AC/DC)", "threshold", 9, "gte"),
    _rule("energy_rating", "Energy Rating (Joules)", "threshold", 8, "gte"),
    _rule("peak_surge_current", "Peak Surge Current (8/20µs)", "threshold", 8, "gte"),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("disc_diameter", "Disc Diameter", "fit", 6),
    _rule("lead_spacing", "Lead Spacing", "identity", 7),
    _rule("response_time", "Response Time", "threshold", 5, "lte"),
    _rule("leakage_current", "Leakage Current", "threshold", 5, "lte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("surge_pulse_lifetime", "Surge Pulse Lifetime", "threshold", 6, "gte"),
    _rule("safety_rating", "Safety Rating (UL 1449 / IEC 61643)", "identity_flag", 8),
    _rule("thermal_disconnect", "Thermal Disconnect", "identity_flag", 8),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
])

PTC_RESETTABLE_FUSES = _table("66", "PTC Resettable Fuses (PolyFuses)", "Passives", "Polymeric PTC resettable overcurrent protectors", [
    _rule("hold_current", "Hold Current", "identity", 10,
          reason="Hold current sets the protection point; a higher value under-protects"),
    _rule("trip_current", "Trip Current", "threshold", 9, "lte"),
    _rule("max_voltage", "Max Voltage", "threshold", 10, "gte"),
    _rule("max_fault_current", "Max Fault Current", "threshold", 8, "gte"),
    _rule("time_to_trip", "Time to Trip", "threshold", 7, "lte"),
    _rule("initial_resistance", "Initial Resistance", "threshold", 6, "lte"),
    _rule("post_trip_resistance", "Post-Trip Resistance (R1max)", "threshold", 5, "lte"),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("power_dissipation", "Power Dissipation (Tripped)", "threshold", 5, "lte"),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("endurance_cycles", "Trip Endurance Cycles", "threshold", 6, "gte"),
    _rule("safety_rating", "Safety Rating (UL / TUV)", "identity_flag", 8),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
])

FERRITE_BEADS = _table("70", "Ferrite Beads (Surface Mount)", "Passives", "Chip ferrite beads for power and signal line filtering", [
    _rule("impedance_100mhz", "Impedance @ 100MHz", "identity", 10,
          reason="Impedance at 100MHz is the catalog match point; the full curve still needs review"),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("rated_current", "Rated Current", "threshold", 9, "gte"),
    _rule("dcr", "DC Resistance (DCR)", "threshold", 7, "lte"),
    _rule("number_of_lines", "Number of Lines", "identity", 6),
    _rule("resistance_type", "Type (Standard / High Current / GHz)", "identity", 4),
    _rule("tolerance", "Impedance Tolerance", "threshold", 5, "lte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 6, "range_superset"),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("voltage_rated", "Voltage Rating", "threshold", 5, "gte"),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
])

INDUCTOR_CORE_HIERARCHY = ("Metal Composite", "Ferrite", "Iron Powder")

POWER_INDUCTORS = _table("71", "Power Inductors", "Passives", "Shielded and unshielded power inductors for DC-DC conversion and filtering", [
    _rule("inductance", "Inductance", "fit", 10, tolerance=0.20, review_band=0.30),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("saturation_current", "Saturation Current (Isat)", "threshold", 9, "gte",
          reason="Ferrite cores saturate hard; inductance collapses above Isat"),
    _rule("rated_current", "Rated Current (Irms)", "threshold", 9, "gte"),
    _rule("dcr", "DC Resistance (DCR)", "threshold", 7, "lte"),
    _rule("core_material", "Core Material", "identity_upgrade", 6, hierarchy=INDUCTOR_CORE_HIERARCHY,
          reason="Metal composite saturates softly; ferrite saturates abruptly"),
    _rule("inductance_vs_dc_bias", "Inductance Drop at Rated Current", "threshold", 5, "lte"),
    _rule("shielding", "Shielded", "identity_flag", 7),
    _rule("srf", "Self-Resonant Frequency (SRF)", "threshold", 5, "gte"),
    _rule("tolerance", "Inductance Tolerance", "threshold", 5, "lte"),
    _rule("construction_type", "Construction (Wirewound / Multilayer / Molded)", "identity", 5),
    _rule("height", "Height (Seated Max)", "threshold", 6, "lte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("aec_q200", "AEC-Q200 Qualification", "identity_flag", 8),
])

RF_SIGNAL_INDUCTORS = build_derived_table(POWER_INDUCTORS, TableDelta(
    family_id="72",
    family_name="RF / Signal Inductors",
    category="Passives",
    description="Derived from power inductors with RF signal-frequency priority inversions",
    override={
        "saturation_current": {
            "base_weight": 5,
            "base_tier": Tier.SECONDARY,
            "engineering_reason": "Signal-level currents rarely approach saturation",
        },
        "core_material": {
            "logic_type": "identity",
            "upgrade_hierarchy": (),
            "engineering_reason": "Air, ceramic and ferrite cores have different loss at RF; no core is a drop-in upgrade",
        },
        "srf": {"base_weight": 8, "base_tier": Tier.PRIMARY},
    },
    add=(
        _rule("q_factor", "Q Factor", "threshold", 9, "gte"),
        _rule("inductance_tolerance", "Inductance Tolerance (RF)", "threshold", 7, "lte"),
    ),
))

# =============================================================================
# DISCRETE SEMICONDUCTORS
# =============================================================================

RECOVERY_HIERARCHY = ("Soft", "Snappy")

RECTIFIER_DIODES = _table("B1", "Rectifier Diodes", "Discrete Semiconductors", "Standard, fast and ultrafast recovery silicon rectifiers", [
    _rule("vrrm", "Max Repetitive Reverse Voltage (Vrrm)", "threshold", 10, "gte"),
    _rule("io_avg", "Average Rectified Current (Io)", "threshold", 10, "gte"),
    _rule("vf", "Forward Voltage (Vf)", "threshold", 8, "lte"),
    _rule("trr", "Reverse Recovery Time (trr)", "threshold", 8, "lte"),
    _rule("qrr", "Reverse Recovery Charge (Qrr)", "threshold", 6, "lte"),
    _rule("recovery_behavior", "Recovery Behavior (Soft / Snappy)", "identity_upgrade", 5, hierarchy=RECOVERY_HIERARCHY),
    _rule("ifsm", "Surge Current (Ifsm)", "threshold", 7, "gte"),
    _rule("ir_leakage", "Reverse Leakage Current (Ir)", "threshold", 5, "lte"),
    _rule("cj", "Junction Capacitance (Cj)", "threshold", 4, "lte"),
    _rule("configuration", "Configuration (Single / Dual / Bridge)", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("pin_configuration", "Pin Configuration", "identity", 10),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 7, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("mounting_style", "Mounting Style", "identity", 9),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
])

SCHOTTKY_DIODES = _table("B2", "Schottky Diodes", "Discrete Semiconductors", "Schottky barrier rectifiers, Si and SiC", [
    _rule("schottky_technology", "Schottky Technology", "identity", 10),
    _rule("vrrm", "Max Repetitive Reverse Voltage (Vrrm)", "threshold", 10, "gte"),
    _rule("io_avg", "Average Rectified Current (Io)", "threshold", 10, "gte"),
    _rule("vf", "Forward Voltage (Vf)", "threshold", 9, "lte"),
    _rule("ir_leakage", "Reverse Leakage Current (Ir)", "threshold", 7, "lte"),
    _rule("ifsm", "Surge Current (Ifsm)", "threshold", 7, "gte"),
    _rule("cj", "Junction Capacitance (Cj)", "threshold", 6, "lte"),
    _rule("semiconductor_material", "Semiconductor Material (Si / SiC)", "identity", 9),
    _rule("configuration", "Configuration", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("pin_configuration", "Pin Configuration", "identity", 10),
    _rule("rth_jc", "Thermal Resistance Junction-Case", "threshold", 7, "lte"),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 7, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("pd", "Power Dissipation", "threshold", 6, "gte"),
    _rule("vf_tempco", "Vf Temperature Coefficient", "identity", 5),
    _rule("mounting_style", "Mounting Style", "identity", 9),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
])

ZENER_DIODES = _table("B3", "Zener Diodes / Voltage Reference Diodes", "Discrete Semiconductors", "Zener and avalanche voltage reference and clamp diodes", [
    _rule("vz", "Zener Voltage (Vz)", "identity", 10),
    _rule("vz_tolerance", "Vz Tolerance", "threshold", 8, "lte"),
    _rule("pd", "Power Dissipation", "threshold", 9, "gte"),
    _rule("zzt", "Dynamic Impedance (Zzt)", "threshold", 7, "lte"),
    _rule("zzk", "Knee Impedance (Zzk)", "threshold", 4, "lte"),
    _rule("tc", "Temperature Coefficient", "threshold", 7, "lte"),
    _rule("izt", "Test Current (Izt)", "identity", 8,
          reason="Vz is specified at Izt; a different test current shifts the operating point"),
    _rule("izm", "Max Zener Current (Izm)", "threshold", 6, "gte"),
    _rule("ir_leakage", "Reverse Leakage Current (Ir)", "threshold", 5, "lte"),
    _rule("cj", "Junction Capacitance (Cj)", "threshold", 4, "lte"),
    _rule("regulation_type", "Breakdown Mechanism (Zener / Avalanche)", "identity", 3),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("pin_configuration", "Pin Configuration", "identity", 10),
    _rule("configuration", "Configuration", "identity", 9),
    _rule("mounting_style", "Mounting Style", "identity", 9),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 6, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
])

TVS_DIODES = _table("B4", "TVS Diodes - Transient Voltage Suppressors", "Discrete Semiconductors", "Unidirectional and bidirectional TVS diodes and ESD arrays", [
    _rule("polarity", "Polarity (Uni / Bidirectional)", "identity", 10,
          reason="A unidirectional TVS conducts on normal negative swings of an AC line"),
    _rule("vrwm", "Reverse Standoff Voltage (Vrwm)", "identity", 10),
    _rule("vbr", "Breakdown Voltage (Vbr)", "identity", 9),
    _rule("vc", "Clamping Voltage (Vc)", "threshold", 10, "lte"),
    _rule("ppk", "Peak Pulse Power (Ppk)", "threshold", 9, "gte"),
    _rule("ipp", "Peak Pulse Current (Ipp)", "threshold", 8, "gte"),
    _rule("cj", "Junction Capacitance (Cj)", "threshold", 8, "lte"),
    _rule("ir_leakage", "Reverse Leakage Current (Ir)", "threshold", 5, "lte"),
    _rule("response_time", "Response Time", "threshold", 6, "lte"),
    _rule("esd_rating", "ESD Rating (IEC 61000-4-2)", "threshold", 7, "gte"),
    _rule("num_channels", "Number of Channels", "identity", 10),
    _rule("configuration", "Configuration", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("pin_configuration", "Pin Configuration", "identity", 10),
    _rule("mounting_style", "Mounting Style", "identity", 9),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 5, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 6, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("pd", "Steady-State Power Dissipation", "threshold", 5, "gte"),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
    _rule("surge_standard", "Surge Standard Compliance", "identity_flag", 8),
])

MOSFETS = _table("B5", "MOSFETs", "Discrete Semiconductors", "Single N and P channel power MOSFETs", [
    _rule("channel_type", "Channel Type", "identity", 10),
    _rule("technology", "Technology (Si / SiC / GaN)", "identity", 9),
    _rule("pin_configuration", "Pin Configuration", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
    _rule("vds_max", "Drain-Source Voltage (Vds)", "threshold", 10, "gte"),
    _rule("vgs_max", "Gate-Source Voltage Max (Vgs)", "threshold", 8, "gte"),
    _rule("id_max", "Continuous Drain Current (Id)", "threshold", 10, "gte"),
    _rule("id_pulse", "Pulsed Drain Current", "threshold", 7, "gte"),
    _rule("pd", "Power Dissipation", "threshold", 6, "gte"),
    _rule("avalanche_energy", "Avalanche Energy (Eas)", "threshold", 7, "gte"),
    _rule("rds_on", "Rds(on)", "threshold", 9, "lte"),
    _rule("vgs_th", "Gate Threshold Voltage Vgs(th)", "threshold", 6, "lte"),
    _rule("qg", "Total Gate Charge (Qg)", "threshold", 8, "lte"),
    _rule("qgd", "Gate-Drain Charge (Qgd)", "threshold", 7, "lte"),
    _rule("qgs", "Gate-Source Charge (Qgs)", "threshold", 6, "lte"),
    _rule("ciss", "Input Capacitance (Ciss)", "threshold", 6, "lte"),
    _rule("coss", "Output Capacitance (Coss)", "fit", 7),
    _rule("crss", "Reverse Transfer Capacitance (Crss)", "threshold", 7, "lte"),
    _rule("body_diode_vf", "Body Diode Forward Voltage", "threshold", 6, "lte"),
    _rule("body_diode_trr", "Body Diode Reverse Recovery (trr)", "threshold", 8, "lte"),
    _rule("rth_jc", "Thermal Resistance Junction-Case", "threshold", 7, "lte"),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 5, "lte"),
    _rule("soa", "Safe Operating Area", "identity", 7),
    _rule("height", "Height (Seated Max)", "fit", 5),
    _rule("mounting_style", "Mounting Style", "identity", 9),
])

BJTS = _table("B6", "BJTs - NPN & PNP", "Discrete Semiconductors", "Small-signal and power bipolar junction transistors", [
    _rule("polarity", "Polarity (NPN / PNP)", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("vceo_max", "Collector-Emitter Voltage (Vceo)", "threshold", 9, "gte"),
    _rule("vces_max", "Collector-Emitter Voltage (Vces)", "threshold", 7, "gte"),
    _rule("ic_max", "Continuous Collector Current (Ic)", "threshold", 10, "gte"),
    _rule("hfe", "DC Current Gain (hFE)", "threshold", 8, "gte",
          reason="Gain at the operating collector current; a lower minimum hFE starves the load"),
    _rule("vce_sat", "Vce(sat)", "threshold", 8, "lte"),
    _rule("vbe_sat", "Vbe(sat)", "threshold", 6, "lte"),
    _rule("ft", "Transition Frequency (ft)", "threshold", 7, "gte"),
    _rule("tst", "Storage Time (tst)", "threshold", 8, "lte"),
    _rule("ton", "Turn-On Time", "threshold", 6, "lte"),
    _rule("toff", "Turn-Off Time", "threshold", 7, "lte"),
    _rule("pd", "Power Dissipation", "threshold", 7, "gte"),
    _rule("soa", "Safe Operating Area", "identity", 7),
    _rule("rth_jc", "Thermal Resistance Junction-Case", "threshold", 7, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 6, "gte"),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
])

IGBT_TECHNOLOGY_HIERARCHY = ("FS", "NPT", "PT")

IGBTS = _table("B7", "IGBTs - Insulated Gate Bipolar Transistors", "Discrete Semiconductors", "Discrete IGBTs with and without co-packaged diodes", [
    _rule("channel_type", "Channel Type", "identity", 10),
    _rule("igbt_technology", "IGBT Technology (FS / NPT / PT)", "identity_upgrade", 9, hierarchy=IGBT_TECHNOLOGY_HIERARCHY,
          reason="Field-stop trades Vce(sat) against tail current better than NPT or PT"),
    _rule("co_packaged_diode", "Co-Packaged Anti-Parallel Diode", "identity_flag", 10,
          reason="Without the diode, bridge freewheeling current has no path"),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("mounting_style", "Mounting Style", "identity", 9),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 8),
    _rule("vces_max", "Collector-Emitter Voltage (Vces)", "threshold", 10, "gte"),
    _rule("ic_max", "Continuous Collector Current (Ic)", "threshold", 10, "gte"),
    _rule("ic_pulse", "Pulsed Collector Current", "threshold", 7, "gte"),
    _rule("pd", "Power Dissipation", "threshold", 6, "gte"),
    _rule("vge_max", "Gate-Emitter Voltage Max", "threshold", 8, "gte"),
    _rule("vge_th", "Gate Threshold Voltage Vge(th)", "fit", 6),
    _rule("vce_sat", "Vce(sat)", "threshold", 9, "lte"),
    _rule("eoff", "Turn-Off Energy (Eoff)", "threshold", 9, "lte"),
    _rule("eon", "Turn-On Energy (Eon)", "threshold", 8, "lte"),
    _rule("td_on", "Turn-On Delay", "threshold", 6, "lte"),
    _rule("td_off", "Turn-Off Delay", "threshold", 6, "lte"),
    _rule("tf", "Fall Time", "threshold", 6, "lte"),
    _rule("qg", "Total Gate Charge (Qg)", "threshold", 7, "lte"),
    _rule("tsc", "Short-Circuit Withstand Time (tsc)", "threshold", 9, "gte"),
    _rule("soa", "Safe Operating Area", "identity", 7),
    _rule("rth_jc", "Thermal Resistance Junction-Case", "threshold", 7, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 6, "gte"),
    _rule("height", "Height (Seated Max)", "fit", 5),
])

THYRISTORS = _table("B8", "Thyristors / TRIACs / SCRs", "Discrete Semiconductors", "SCRs, TRIACs and DIACs for AC and DC power control", [
    _rule("device_type", "Device Type (SCR / TRIAC / DIAC)", "identity", 10),
    _rule("gate_sensitivity", "Gate Sensitivity Class", "identity", 8),
    _rule("package_case", "Package / Case", "identity", 8),
    _rule("vdrm", "Repetitive Off-State Voltage (Vdrm)", "threshold", 9, "gte"),
    _rule("vdsm", "Non-Repetitive Off-State Voltage (Vdsm)", "threshold", 5, "gte"),
    _rule("on_state_current", "On-State Current (It(rms))", "threshold", 9, "gte"),
    _rule("itsm", "Surge Current (Itsm)", "threshold", 7, "gte"),
    _rule("i2t", "Fusing Integral (I²t)", "threshold", 6, "gte"),
    _rule("igt", "Gate Trigger Current (Igt)", "threshold", 7, "lte"),
    _rule("vgt", "Gate Trigger Voltage (Vgt)", "threshold", 5, "lte"),
    _rule("ih", "Holding Current (Ih)", "threshold", 7, "lte"),
    _rule("il", "Latching Current (Il)", "threshold", 6, "lte"),
    _rule("dv_dt", "Critical dV/dt", "threshold", 7, "gte"),
    _rule("di_dt", "Critical dI/dt", "threshold", 6, "gte"),
    _rule("tgt", "Gate-Controlled Turn-On Time", "threshold", 4, "lte"),
    _rule("tq", "Circuit-Commutated Turn-Off Time (tq)", "threshold", 5, "lte"),
    _rule("quadrant_operation", "Quadrant Operation", "identity", 8),
    _rule("snubberless", "Snubberless Rated", "identity_flag", 6),
    _rule("rth_jc", "Thermal Resistance Junction-Case", "threshold", 5, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 4, "gte"),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 3),
])

JFETS = _table("B9", "JFETs - Junction Field-Effect Transistors", "Discrete Semiconductors", "N and P channel JFETs for low-noise, RF and high-impedance inputs", [
    _rule("channel_type", "Channel Type", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("vp", "Pinch-Off Voltage (Vp)", "fit", 10, tolerance=0.25, review_band=0.50,
          reason="Vp spreads widely between lots; the replacement range must overlap the bias design"),
    _rule("idss", "Saturation Drain Current (Idss)", "fit", 9, tolerance=0.25, review_band=0.50),
    _rule("gfs", "Forward Transconductance (gfs)", "threshold", 7, "gte"),
    _rule("noise_figure", "Noise Figure", "threshold", 8, "lte"),
    _rule("fc_1f_corner", "1/f Noise Corner Frequency", "threshold", 7, "lte"),
    _rule("vds_max", "Drain-Source Voltage Max", "threshold", 8, "gte"),
    _rule("vgs_max", "Gate-Source Voltage Max", "threshold", 6, "gte"),
    _rule("igss", "Gate Leakage Current (Igss)", "threshold", 9, "lte"),
    _rule("ft", "Unity-Gain Frequency (ft)", "threshold", 6, "gte"),
    _rule("ciss", "Input Capacitance (Ciss)", "threshold", 5, "lte"),
    _rule("crss", "Reverse Transfer Capacitance (Crss)", "threshold", 5, "lte"),
    _rule("pd_max", "Power Dissipation", "threshold", 4, "gte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 4, "gte"),
    _rule("aec_q101", "AEC-Q101 Qualification", "identity_flag", 5),
])

# =============================================================================
# POWER MANAGEMENT ICS
# =============================================================================

LDO_REGULATORS = _table("C1", "Linear Voltage Regulators (LDO)", "Power Management ICs", "Fixed and adjustable low-dropout linear regulators", [
    _rule("output_type", "Output Type (Fixed / Adjustable)", "identity", 10),
    _rule("output_voltage", "Output Voltage", "identity", 10),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("polarity", "Polarity (Positive / Negative)", "identity", 10),
    _rule("vin_max", "Max Input Voltage", "threshold", 8, "gte"),
    _rule("vin_min", "Min Input Voltage", "threshold", 7, "lte"),
    _rule("iout_max", "Max Output Current", "threshold", 9, "gte"),
    _rule("vdropout", "Dropout Voltage", "threshold", 7, "lte"),
    _rule("iq", "Quiescent Current (Iq)", "threshold", 5, "lte"),
    _rule("vout_accuracy", "Output Voltage Accuracy", "threshold", 7, "lte"),
    _rule("output_cap_compatibility", "Ceramic Output Capacitor Stable", "identity_flag", 8,
          reason="ESR-stabilized LDOs oscillate with low-ESR ceramic output capacitors"),
    _rule("psrr", "PSRR", "threshold", 6, "gte"),
    _rule("load_regulation", "Load Regulation", "threshold", 5, "lte"),
    _rule("line_regulation", "Line Regulation", "threshold", 4, "lte"),
    _rule("enable_pin", "Enable Pin", "identity", 8),
    _rule("power_good", "Power Good Output", "identity_flag", 6),
    _rule("soft_start", "Soft Start", "identity_flag", 5),
    _rule("thermal_shutdown", "Thermal Shutdown", "identity_flag", 6),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 7, "gte"),
    _rule("aec_q100", "AEC-Q100 Qualification", "identity_flag", 8),
])

SWITCHING_REGULATORS = _table("C2", "Switching Regulators (DC-DC Converters & Controllers)", "Power Management ICs", "Integrated-switch DC-DC converters and external-FET controllers", [
    _rule("topology", "Topology (Buck / Boost / Buck-Boost / Flyback)", "identity", 10, block_on_missing=True),
    _rule("architecture", "Architecture (Integrated Switch / Controller)", "identity", 10, block_on_missing=True,
          reason="A controller needs external FETs the integrated-switch footprint does not have"),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("control_mode", "Control Mode (Voltage / Current / COT)", "identity", 9,
          reason="The external compensation network is tuned to the control mode"),
    _rule("output_polarity", "Output Polarity", "identity", 10),
    _rule("vin_min", "Min Input Voltage", "threshold", 7, "lte"),
    _rule("vin_max", "Max Input Voltage", "threshold", 8, "gte"),
    _rule("vout_range", "Output Voltage Range", "threshold", 8, "range_superset"),
    _rule("iout_max", "Max Output Current", "threshold", 9, "gte"),
    _rule("fsw", "Switching Frequency", "identity", 8,
          reason="Inductor and output capacitor values are sized for the switching frequency"),
    _rule("ton_min", "Minimum On-Time", "threshold", 7, "lte"),
    _rule("gate_drive_current", "Gate Drive Current", "threshold", 7, "gte"),
    _rule("vref", "Feedback Reference Voltage", "identity", 9,
          reason="A different reference voltage changes Vout with the same feedback divider"),
    _rule("compensation_type", "Compensation (Internal / External)", "identity_flag", 8),
    _rule("soft_start", "Soft Start", "identity_flag", 6),
    _rule("enable_uvlo", "Enable / UVLO Pin", "identity_flag", 7),
    _rule("ocp_mode", "Overcurrent Protection Mode", "identity_flag", 6),
    _rule("thermal_shutdown", "Thermal Shutdown Threshold", "threshold", 6, "gte"),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 7, "gte"),
    _rule("aec_q100", "AEC-Q100 Qualification", "identity_flag", 8),
])

GATE_DRIVERS = _table("C3", "Gate Drivers", "Power Management ICs", "MOSFET/IGBT/SiC/GaN gate drivers, isolated and non-isolated", [
    _rule("driver_configuration", "Driver Configuration", "identity", 10, block_on_missing=True,
          reason="Single, dual, half-bridge and full-bridge drivers are not interchangeable"),
    _rule("isolation_type", "Isolation Type", "identity", 10, block_on_missing=True,
          reason="Galvanic isolation cannot be replaced by a non-isolated bootstrap driver"),
    _rule("package_case", "Package / Footprint", "identity", 10),
    _rule("input_logic_threshold", "Input Logic Threshold", "identity", 8),
    _rule("output_polarity", "Output Polarity (Inverting / Non-Inverting)", "identity", 9),
    _rule("peak_source_current", "Peak Source Current", "threshold", 8, "gte"),
    _rule("peak_sink_current", "Peak Sink Current", "threshold", 8, "gte"),
    _rule("vdd_range", "VDD Supply Range", "threshold", 8, "range_superset"),
    _rule("propagation_delay", "Propagation Delay", "threshold", 7, "lte"),
    _rule("rise_fall_time", "Rise / Fall Time", "threshold", 6, "lte"),
    _rule("dead_time_control", "Dead-Time Control", "identity_flag", 7),
    _rule("dead_time", "Dead Time", "threshold", 7, "gte"),
    _rule("uvlo", "UVLO Threshold", "threshold", 7, "lte"),
    _rule("shutdown_enable", "Shutdown / Enable", "identity_flag", 6),
    _rule("bootstrap_diode", "Integrated Bootstrap Diode", "identity_flag", 6),
    _rule("fault_reporting", "Fault Reporting", "identity_flag", 5),
    _rule("rth_ja", "Thermal Resistance Junction-Ambient", "threshold", 6, "lte"),
    _rule("tj_max", "Max Junction Temperature", "threshold", 7, "gte"),
    _rule("aec_q100", "AEC-Q100 Qualification", "identity_flag", 8),
])

# =============================================================================
# ANALOG AND LOGIC ICS
# =============================================================================

OPAMP_INPUT_HIERARCHY = ("CMOS", "JFET", "Bipolar")

OPAMP_COMPARATORS = _table("C4", "Op-Amps / Comparators / Instrumentation Amplifiers", "Integrated Circuits", "Operational amplifiers, comparators and instrumentation amplifiers", [
    _rule("device_type", "Device Type (Op-Amp / Comparator / In-Amp)", "identity", 10, block_on_missing=True,
          reason="Comparators are not compensated for closed-loop use; op-amps are slow comparators"),
    _rule("channels", "Number of Channels", "identity", 10, block_on_missing=True),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("input_type", "Input Stage (CMOS / JFET / Bipolar)", "identity_upgrade", 9, hierarchy=OPAMP_INPUT_HIERARCHY),
    _rule("output_type", "Output Type (Push-Pull / Open-Drain)", "identity", 8),
    _rule("rail_to_rail_input", "Rail-to-Rail Input", "identity_flag", 8),
    _rule("rail_to_rail_output", "Rail-to-Rail Output", "identity_flag", 8),
    _rule("supply_voltage", "Supply Voltage Range", "threshold", 8, "range_superset"),
    _rule("vicm_range", "Input Common-Mode Range", "threshold", 9, "range_superset", block_on_missing=True),
    _rule("gain_bandwidth", "Gain-Bandwidth Product", "threshold", 8, "gte"),
    _rule("slew_rate", "Slew Rate", "threshold", 7, "gte"),
    _rule("input_offset_voltage", "Input Offset Voltage (Vos)", "threshold", 7, "lte"),
    _rule("input_bias_current", "Input Bias Current (Ib)", "threshold", 7, "lte"),
    _rule("input_noise_voltage", "Input Voltage Noise Density", "threshold", 6, "lte"),
    _rule("avol", "Open-Loop Gain (Avol)", "threshold", 5, "gte"),
    _rule("cmrr", "CMRR", "threshold", 5, "gte"),
    _rule("psrr", "PSRR", "threshold", 5, "gte"),
    _rule("min_stable_gain", "Minimum Stable Gain", "threshold", 8, "lte",
          reason="Decompensated parts oscillate below their minimum stable gain"),
    _rule("iq", "Quiescent Current per Channel", "threshold", 5, "lte"),
    _rule("response_time", "Comparator Response Time", "threshold", 7, "lte"),
    _rule("output_current", "Output Current", "threshold", 6, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("aec_q100", "AEC-Q100 Qualification", "identity_flag", 8),
])

LOGIC_ICS = _table("C5", "Logic ICs - 74-Series Standard Logic", "Integrated Circuits", "74-series gates, buffers, flip-flops and bus transceivers", [
    _rule("logic_function", "Logic Function", "identity", 10, block_on_missing=True,
          reason="A 74xx04 is not a 74xx14; the function code must match"),
    _rule("gate_count", "Gate / Channel Count", "identity", 10, block_on_missing=True),
    _rule("package_case", "Package / Case", "identity", 10),
    _rule("logic_family", "Logic Family (HC / HCT / AC / LVC)", "identity", 7),
    _rule("output_type", "Output Type (Totem-Pole / Open-Drain / 3-State)", "identity_flag", 8),
    _rule("oe_polarity", "Output Enable Polarity", "identity_flag", 9),
    _rule("voh", "Output High Voltage (Voh)", "threshold", 7, "gte"),
    _rule("vol", "Output Low Voltage (Vol)", "threshold", 6, "lte"),
    _rule("drive_current", "Output Drive Current", "threshold", 7, "gte"),
    _rule("schmitt_trigger", "Schmitt Trigger Inputs", "identity_flag", 7),
    _rule("vih", "Input High Threshold (Vih)", "threshold", 7, "lte"),
    _rule("vil", "Input Low Threshold (Vil)", "threshold", 6, "gte"),
    _rule("input_clamp_diodes", "Overvoltage-Tolerant Inputs", "identity_flag", 4),
    _rule("input_leakage", "Input Leakage Current", "threshold", 4, "lte"),
    _rule("bus_hold", "Bus Hold", "identity_flag", 5),
    _rule("supply_voltage", "Supply Voltage Range", "threshold", 8, "range_superset"),
    _rule("tpd", "Propagation Delay (tpd)", "threshold", 7, "lte"),
    _rule("fmax", "Max Toggle Frequency", "threshold", 6, "gte"),
    _rule("operating_temp", "Operating Temp Range", "threshold", 7, "range_superset"),
    _rule("aec_q100", "AEC-Q100 Qualification", "identity_flag", 8),
])


# =============================================================================
# REGISTRY
# =============================================================================

LOGIC_TABLES: dict[str, LogicTable] = {
    table.family_id: table
    for table in (
        MLCC,
        MICA_CAPACITORS,
        CHIP_RESISTORS,
        THROUGH_HOLE_RESISTORS,
        CURRENT_SENSE_RESISTORS,
        CHASSIS_MOUNT_RESISTORS,
        ALUMINUM_ELECTROLYTIC,
        ALUMINUM_POLYMER,
        VARISTORS,
        PTC_RESETTABLE_FUSES,
        FERRITE_BEADS,
        POWER_INDUCTORS,
        RF_SIGNAL_INDUCTORS,
        RECTIFIER_DIODES,
        SCHOTTKY_DIODES,
        ZENER_DIODES,
        TVS_DIODES,
        MOSFETS,
        BJTS,
        IGBTS,
        THYRISTORS,
        JFETS,
        LDO_REGULATORS,
        SWITCHING_REGULATORS,
        GATE_DRIVERS,
        OPAMP_COMPARATORS,
        LOGIC_ICS,
    )
}


def get_logic_table(family_id: str) -> LogicTable | None:
    return LOGIC_TABLES.get(family_id)


def get_all_logic_tables() -> list[LogicTable]:
    return list(LOGIC_TABLES.values())
