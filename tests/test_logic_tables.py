"""Tests for rule tables, derived tables, family resolution and context question data."""

import dataclasses

import pytest

from partxref_mcp.context_questions import CONTEXT_REGISTRY, get_context_questions
from partxref_mcp.families import (
    classify_family,
    get_supported_family_names,
    is_family_supported,
    resolve_family,
    resolve_subcategory,
)
from partxref_mcp.logic_tables import (
    ALUMINUM_ELECTROLYTIC,
    ALUMINUM_POLYMER,
    CHASSIS_MOUNT_RESISTORS,
    CHIP_RESISTORS,
    CURRENT_SENSE_RESISTORS,
    LOGIC_TABLES,
    MICA_CAPACITORS,
    MLCC,
    POWER_INDUCTORS,
    RF_SIGNAL_INDUCTORS,
    TableDelta,
    build_derived_table,
    get_all_logic_tables,
    get_logic_table,
    tier_for_weight,
)
from partxref_mcp.models import (
    EFFECT_TYPES,
    LOGIC_TYPES,
    AttributeRule,
    LogicTable,
    Parameter,
    Part,
    PartAttributes,
    Tier,
)


def _attrs(mpn: str, subcategory: str, description: str = "", **params: str) -> PartAttributes:
    return PartAttributes(
        part=Part(mpn=mpn, subcategory=subcategory, description=description),
        parameters=tuple(Parameter(pid, pid, value) for pid, value in params.items()),
    )


# =============================================================================
# RULE TABLES
# =============================================================================


class TestTierForWeight:
    def test_boundaries(self):
        assert tier_for_weight(10) == Tier.MANDATORY
        assert tier_for_weight(9) == Tier.PRIMARY
        assert tier_for_weight(8) == Tier.PRIMARY
        assert tier_for_weight(7) == Tier.SECONDARY
        assert tier_for_weight(1) == Tier.SECONDARY

    def test_tier_ordering(self):
        assert Tier.NOT_APPLICABLE < Tier.SECONDARY < Tier.PRIMARY < Tier.MANDATORY
        assert max(Tier.SECONDARY, Tier.MANDATORY) == Tier.MANDATORY


class TestLogicTables:
    @pytest.mark.parametrize("table", get_all_logic_tables(), ids=lambda t: t.family_id)
    def test_attribute_ids_unique(self, table):
        ids = [r.attribute_id for r in table.rules]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("table", get_all_logic_tables(), ids=lambda t: t.family_id)
    def test_sort_order_increasing(self, table):
        orders = [r.sort_order for r in table.rules]
        assert orders[0] >= 1
        assert all(a < b for a, b in zip(orders, orders[1:]))

    @pytest.mark.parametrize("table", get_all_logic_tables(), ids=lambda t: t.family_id)
    def test_rules_well_formed(self, table):
        for rule in table.rules:
            assert rule.logic_type in LOGIC_TYPES
            assert 0 <= rule.base_weight <= 10
            if rule.logic_type == "threshold":
                assert rule.direction in ("gte", "lte", "range_superset"), rule.attribute_id
            if rule.logic_type == "identity_upgrade":
                assert rule.upgrade_hierarchy, rule.attribute_id

    def test_registry_lookup(self):
        assert get_logic_table("12") is MLCC
        assert get_logic_table("ZZ") is None
        assert set(LOGIC_TABLES) == {
            "12", "13", "52", "53", "54", "55", "58", "60", "65", "66", "70", "71", "72",
            "B1", "B2", "B3", "B4", "B5", "B6", "B7", "B8", "B9",
            "C1", "C2", "C3", "C4", "C5",
        }

    def test_blocking_identity_gates(self):
        assert get_logic_table("C2").get_rule("topology").block_on_missing
        assert get_logic_table("C4").get_rule("vicm_range").block_on_missing
        assert get_logic_table("C5").get_rule("logic_function").block_on_missing
        assert not get_logic_table("B7").get_rule("eoff").block_on_missing

    def test_mlcc_key_rules(self):
        capacitance = MLCC.get_rule("capacitance")
        assert capacitance.logic_type == "fit"
        assert capacitance.base_tier == Tier.MANDATORY
        assert MLCC.get_rule("voltage_rated").direction == "gte"
        assert MLCC.get_rule("dielectric").base_tier == Tier.SECONDARY

    def test_gate_driver_blocking_rules(self):
        table = get_logic_table("C3")
        assert table.get_rule("driver_configuration").block_on_missing
        assert table.get_rule("isolation_type").block_on_missing
        assert not table.get_rule("package_case").block_on_missing


class TestDerivedTables:
    @pytest.fixture
    def base(self):
        rules = tuple(
            AttributeRule(attribute_id=a, attribute_name=a.upper(), logic_type="identity",
                          base_tier=Tier.SECONDARY, base_weight=5, sort_order=i)
            for i, a in enumerate(("a", "b", "c"), start=1)
        )
        return LogicTable("X", "Base", "Test", "", rules)

    def test_remove_override_add_order(self, base):
        added = AttributeRule(attribute_id="d", attribute_name="D", logic_type="identity_flag",
                              base_tier=Tier.PRIMARY, base_weight=8)
        delta = TableDelta(
            family_id="Y", family_name="Variant", category="Test", description="",
            remove=("b",),
            override={"c": {"base_weight": 9, "base_tier": Tier.PRIMARY}, "b": {"base_weight": 10}},
            add=(added,),
        )
        derived = build_derived_table(base, delta)

        assert [r.attribute_id for r in derived.rules] == ["a", "c", "d"]
        assert derived.get_rule("c").base_weight == 9
        assert derived.get_rule("b") is None  # Override on a removed attribute is skipped
        assert derived.get_rule("d").sort_order == 4
        assert derived.family_id == "Y"

    def test_base_not_mutated(self, base):
        before = dataclasses.astuple(base)
        build_derived_table(base, TableDelta("Y", "Variant", "Test", "", remove=("a",), override={"c": {"base_weight": 1}}))
        assert dataclasses.astuple(base) == before

    def test_current_sense_from_chip_resistors(self):
        assert CURRENT_SENSE_RESISTORS.family_id == "54"
        assert CURRENT_SENSE_RESISTORS.get_rule("tolerance").base_weight == 9
        assert CURRENT_SENSE_RESISTORS.get_rule("tolerance").base_tier == Tier.PRIMARY
        assert CHIP_RESISTORS.get_rule("tolerance").base_weight == 7
        assert CURRENT_SENSE_RESISTORS.get_rule("kelvin_sensing") is not None
        assert CHIP_RESISTORS.get_rule("kelvin_sensing") is None
        assert len(CURRENT_SENSE_RESISTORS.rules) == len(CHIP_RESISTORS.rules) + 4

    def test_mica_from_mlcc(self):
        assert MICA_CAPACITORS.get_rule("dc_bias_derating") is None
        assert MICA_CAPACITORS.get_rule("flexible_termination") is None
        dielectric = MICA_CAPACITORS.get_rule("dielectric")
        assert dielectric.logic_type == "identity"
        assert dielectric.upgrade_hierarchy == ()
        assert dielectric.attribute_name == "Dielectric Material"
        assert MLCC.get_rule("dielectric").logic_type == "identity_upgrade"
        # Added rules follow the last base rule even after removals
        assert MICA_CAPACITORS.get_rule("temperature_coefficient").sort_order == len(MLCC.rules) + 1

    def test_chassis_mount_power_mandatory(self):
        assert CHASSIS_MOUNT_RESISTORS.get_rule("power_rating").base_tier == Tier.MANDATORY
        assert CHIP_RESISTORS.get_rule("power_rating").base_tier == Tier.PRIMARY
        assert CHASSIS_MOUNT_RESISTORS.get_rule("heatsink_dimensions").logic_type == "fit"

    def test_polymer_from_electrolytic(self):
        assert ALUMINUM_POLYMER.get_rule("lifetime") is None
        assert ALUMINUM_ELECTROLYTIC.get_rule("lifetime") is not None
        assert ALUMINUM_POLYMER.get_rule("esr").base_weight == 9
        assert ALUMINUM_POLYMER.get_rule("esr").base_tier == Tier.PRIMARY

    def test_rf_inductor_priority_inversion(self):
        assert RF_SIGNAL_INDUCTORS.get_rule("saturation_current").base_tier == Tier.SECONDARY
        assert POWER_INDUCTORS.get_rule("saturation_current").base_tier == Tier.PRIMARY
        assert RF_SIGNAL_INDUCTORS.get_rule("core_material").logic_type == "identity"
        assert RF_SIGNAL_INDUCTORS.get_rule("q_factor").direction == "gte"


# =============================================================================
# FAMILY RESOLUTION
# =============================================================================


class TestResolveSubcategory:
    def test_exact_case_insensitive(self):
        assert resolve_subcategory("MLCC") == "12"
        assert resolve_subcategory("Gate Drivers") == "C3"

    def test_longest_contained_name(self):
        assert resolve_subcategory("Schottky Diodes & Rectifiers") == "B2"
        assert resolve_subcategory("Automotive Current Sense Resistor Array") == "54"

    @pytest.mark.parametrize("subcategory,family_id", [
        ("TVS - Varistors, MOVs", "65"),
        ("TVS Diodes", "B4"),
        ("Schottky Rectifier", "B2"),
        ("Diodes - Bridge Rectifiers", "B1"),
        ("Thyristors - TRIACs", "B8"),
        ("RF Inductors", "72"),
        ("Through Hole Resistors", "53"),
        ("Silver Mica Capacitors", "13"),
        ("Logic - Gates and Inverters", "C5"),
        ("Instrumentation, OP Amps, Buffer Amps", "C4"),
    ])
    def test_distributor_names(self, subcategory, family_id):
        assert resolve_subcategory(subcategory) == family_id

    def test_unknown(self):
        assert resolve_subcategory("Discrete Semiconductors") is None
        assert resolve_subcategory("Crystals") is None
        assert resolve_subcategory("") is None
        assert resolve_subcategory(None) is None

    def test_supported(self):
        assert is_family_supported("LDO Regulator")
        assert not is_family_supported("Crystals")
        assert "MLCC Capacitors" in get_supported_family_names()


class TestClassifyFamily:
    def test_current_sense_variant(self):
        attrs = _attrs("WSL2512R0100FEA", "Chip Resistor - Surface Mount",
                       "RES 0.01 OHM 1% 1W 2512 Current Sense", resistance="10mΩ")
        assert classify_family("52", attrs) == "54"
        assert resolve_family("Chip Resistor - Surface Mount", attrs) == "54"

    def test_ordinary_resistor(self):
        attrs = _attrs("RC0603FR-0710KL", "Chip Resistor - Surface Mount", "RES 10K OHM 1% 1/10W 0603",
                       resistance="10kΩ")
        assert classify_family("52", attrs) == "52"

    def test_low_value_without_sensing_wording(self):
        attrs = _attrs("RC0603JR-070RL", "Chip Resistor - Surface Mount", "RES 0 OHM JUMPER 0603",
                       resistance="0Ω")
        assert classify_family("52", attrs) == "52"

    def test_without_attrs_returns_base(self):
        assert resolve_family("Chip Resistor - Surface Mount") == "52"

    def test_chassis_mount_by_package(self):
        attrs = _attrs("TO220-10R", "Resistors", "RES 10 OHM 35W TO-220", resistance="10Ω", package_case="TO-220")
        assert classify_family("52", attrs) == "55"

    def test_chassis_mount_by_power(self):
        wirewound = _attrs("WW10-100R", "Resistors", "RES 100 OHM 10W WIREWOUND",
                           resistance="100Ω", power_rating="10W", package_case="Radial")
        assert classify_family("52", wirewound) == "55"
        chip = _attrs("CRM2512-100R", "Resistors", "RES 100 OHM 5W 2512",
                      resistance="100Ω", power_rating="5W", package_case="2512")
        assert classify_family("52", chip) == "52"

    def test_current_sense_checked_before_chassis(self):
        attrs = _attrs("MP930-0.005", "Resistors", "RES 5M OHM 30W Current Sense 4-terminal",
                       resistance="5mΩ", package_case="TO-220")
        assert classify_family("52", attrs) == "54"

    def test_through_hole(self):
        attrs = _attrs("CF14JT1K00", "Resistors", "RES 1K OHM 5% 1/4W AXIAL", resistance="1kΩ", power_rating="1/4W")
        assert classify_family("52", attrs) == "53"

    def test_polymer_excludes_tantalum(self):
        polymer = _attrs("EEH-ZA1E101P", "Aluminum Electrolytic", "CAP ALUM POLYMER 100UF 25V")
        assert classify_family("58", polymer) == "60"
        tantalum = _attrs("T520D107M006", "Aluminum Electrolytic", "Tantalum Polymer 100UF 6.3V")
        assert classify_family("58", tantalum) == "58"
        wet = _attrs("UVR1E101MED", "Aluminum Electrolytic", "CAP ALUM 100UF 25V RADIAL")
        assert classify_family("58", wet) == "58"

    def test_mica(self):
        attrs = _attrs("CD15FD101JO3", "Capacitors", "CAP MICA 100PF 500V")
        assert classify_family("12", attrs) == "13"
        by_dielectric = _attrs("MC12FD101J", "Capacitors", "CAP 100PF 500V", dielectric="Silver Mica")
        assert classify_family("12", by_dielectric) == "13"

    def test_rf_inductor(self):
        worded = _attrs("LQW18AN10NG00", "Inductors", "RF INDUCTOR 10NH 0603")
        assert classify_family("71", worded) == "72"
        small_with_srf = _attrs("0603CS-R10", "Inductors", "FIXED IND 100NH 0603", inductance="100nH", srf="1.2GHz")
        assert classify_family("71", small_with_srf) == "72"

    def test_power_inductor_stays_base(self):
        # "surface" must not read as the word RF
        attrs = _attrs("SRP4020-4R7M", "Inductors", "FIXED IND 4.7UH 2A SURFACE MOUNT",
                       inductance="4.7uH", srf="40MHz")
        assert classify_family("71", attrs) == "71"
        small_without_srf = _attrs("XAL4020-101", "Inductors", "SHIELDED IND 100NH 10A", inductance="100nH")
        assert classify_family("71", small_without_srf) == "71"

    def test_other_base_family_untouched(self):
        attrs = _attrs("GRM188R71H104KA93D", "MLCC", "Current sense filter cap", resistance="0.01")
        assert classify_family("12", attrs) == "12"


# =============================================================================
# CONTEXT QUESTION DATA
# =============================================================================


class TestContextQuestionData:
    @pytest.mark.parametrize("family_id", sorted(CONTEXT_REGISTRY))
    def test_context_matches_a_table(self, family_id):
        assert get_logic_table(family_id) is not None

    @pytest.mark.parametrize("family_id", sorted(CONTEXT_REGISTRY))
    def test_effects_and_conditions_well_formed(self, family_id):
        context = get_context_questions(family_id)
        by_id = {q.question_id: q for q in context.questions}
        assert len(by_id) == len(context.questions)
        for question in context.questions:
            values = [o.value for o in question.options]
            assert len(values) == len(set(values)), question.question_id
            for option in question.options:
                for effect in option.attribute_effects:
                    assert effect.effect in EFFECT_TYPES
            if question.condition:
                parent = by_id[question.condition.depends_on]
                assert parent.priority < question.priority
                assert question.condition.allowed_values <= {o.value for o in parent.options}

    @pytest.mark.parametrize("family_id", sorted(CONTEXT_REGISTRY))
    def test_effects_reference_table_attributes(self, family_id):
        table = get_logic_table(family_id)
        for question in get_context_questions(family_id).questions:
            for option in question.options:
                for effect in option.attribute_effects:
                    assert table.get_rule(effect.attribute_id) is not None, (question.question_id, effect.attribute_id)

    def test_through_hole_reuses_chip_resistor_questions(self):
        assert get_context_questions("53").questions == get_context_questions("52").questions
        assert get_context_questions("53").family_ids == ("53",)

    def test_registry_covers_every_table(self):
        assert set(CONTEXT_REGISTRY) == set(LOGIC_TABLES)

    def test_unknown_family(self):
        assert get_context_questions("ZZ") is None
