"""Application context questions per component family.

Each answer carries attribute effects that the escalation resolver folds into
the family's base rule table. Questions are declarative data; visibility and
effect application live in escalation.py.
"""

from .models import AttributeEffect, ContextOption, ContextQuestion, EffectType, FamilyContext, QuestionCondition


def _fx(attribute_id: str, effect: EffectType, note: str, block_on_missing: bool = False) -> AttributeEffect:
    return AttributeEffect(attribute_id, effect, note, block_on_missing)


def _opt(value: str, label: str, *effects: AttributeEffect, description: str = "") -> ContextOption:
    return ContextOption(value, label, description, tuple(effects))


def _q(
    question_id: str,
    text: str,
    priority: int,
    *options: ContextOption,
    condition: QuestionCondition | None = None,
    allow_free_text: bool = False,
) -> ContextQuestion:
    return ContextQuestion(question_id, text, priority, tuple(options), condition, allow_free_text)


_AUTOMOTIVE_Q200 = "Automotive application: AEC-Q200 qualification is required"
_AUTOMOTIVE_Q101 = "Automotive application: AEC-Q101 discrete qualification is required"

# =============================================================================
# PASSIVES
# =============================================================================

MLCC_CONTEXT = FamilyContext(("12",), "moderate", (
    _q("voltage_ratio", "What is the operating voltage as a fraction of the rated voltage?", 1,
       _opt("low", "Below 50% of rated",
            _fx("dc_bias_derating", "add_review_flag",
                "Low voltage ratio: DC bias derating is minor but should still be checked for X7R/X5R")),
       _opt("medium", "50-80% of rated",
            _fx("dc_bias_derating", "escalate_to_primary",
                "At 50-80% of rated voltage, Class II dielectrics can lose 30-60% of capacitance"),
            _fx("dielectric", "escalate_to_primary",
                "Dielectric choice is critical at this voltage ratio; C0G is immune to DC bias")),
       _opt("high", "Above 80% of rated",
            _fx("dc_bias_derating", "escalate_to_mandatory",
                "Above 80% of rated, Class II effective capacitance may fall below 30% of nominal"),
            _fx("dielectric", "escalate_to_mandatory",
                "Only C0G/NP0 dielectrics hold capacitance above 80% voltage ratio"))),
    _q("flex_pcb", "Is the capacitor mounted on a flex or flex-rigid PCB?", 2,
       _opt("yes", "Yes",
            _fx("flexible_termination", "escalate_to_mandatory",
                "Flex PCB: standard MLCCs crack under board flex, flexible termination is required")),
       _opt("no", "No")),
    _q("audio_path", "Is the capacitor in an audio signal path?", 3,
       _opt("yes", "Yes",
            _fx("dielectric", "escalate_to_primary",
                "Audio path: Class II dielectrics are piezoelectric and cause audible singing")),
       _opt("no", "No")),
    _q("environment", "What environment is this for?", 4,
       _opt("automotive", "Automotive", _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200)),
       _opt("industrial", "Industrial / harsh",
            _fx("operating_temp", "escalate_to_primary",
                "Industrial environment: verify extended temperature range coverage")),
       _opt("consumer", "Consumer")),
))

CHIP_RESISTOR_CONTEXT = FamilyContext(("52",), "low", (
    _q("precision", "Is this a precision or instrumentation application?", 1,
       _opt("yes", "Yes",
            _fx("tolerance", "escalate_to_primary", "Precision application: tighter tolerance matching required"),
            _fx("tcr", "escalate_to_primary", "Precision application: low TCR is critical for measurement stability"),
            _fx("composition", "escalate_to_primary", "Thin film preferred for lower TCR and tighter tolerance")),
       _opt("no", "No")),
    _q("environment", "What environment is this for?", 2,
       _opt("automotive", "Automotive", _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200)),
       _opt("industrial_sulfur", "Industrial, sulfur-rich atmosphere",
            _fx("anti_sulfur", "escalate_to_mandatory",
                "Sulfur-rich environment: anti-sulfur termination prevents open-circuit failures")),
       _opt("standard", "Standard")),
))

CURRENT_SENSE_CONTEXT = FamilyContext(("54",), "high", (
    _q("kelvin_required", "Does the design use Kelvin (4-terminal) sensing?", 1,
       _opt("yes", "Yes",
            _fx("kelvin_sensing", "escalate_to_mandatory",
                "Kelvin layout: a 2-terminal part cannot substitute for a 4-terminal footprint"),
            _fx("package_case", "escalate_to_mandatory",
                "Kelvin layout: 4-terminal parts have a different pad layout")),
       _opt("no", "No")),
    _q("measurement_precision", "What measurement precision is required?", 2,
       _opt("high", "High (better than 1%)",
            _fx("tolerance", "escalate_to_mandatory", "High precision: tolerance of 1% or better required"),
            _fx("tcr", "escalate_to_mandatory", "High precision: low TCR keeps accuracy over temperature"),
            _fx("parasitic_inductance", "escalate_to_primary",
                "High precision: parasitic inductance adds measurement error at higher frequencies"),
            _fx("long_term_stability", "escalate_to_primary",
                "High precision: resistance drift degrades accuracy over time")),
       _opt("standard", "Standard"),
       _opt("rough", "Rough / protection only")),
    _q("sensing_frequency", "What is the switching frequency?", 3,
       _opt("dc_low", "DC or low frequency"),
       _opt("high_frequency", "High frequency switching",
            _fx("parasitic_inductance", "escalate_to_mandatory",
                "High-frequency sensing: parasitic inductance distorts the measurement")),
       _opt("unknown", "Unknown",
            _fx("parasitic_inductance", "add_review_flag",
                "Unknown switching frequency: parasitic inductance impact is uncertain"))),
))

THROUGH_HOLE_CONTEXT = FamilyContext(("53",), "low", CHIP_RESISTOR_CONTEXT.questions)

CHASSIS_MOUNT_CONTEXT = FamilyContext(("55",), "moderate", (
    _q("thermal_management", "How is the resistor thermally managed?", 1,
       _opt("dedicated_heatsink", "Dedicated heatsink with known thermal resistance",
            _fx("thermal_resistance", "escalate_to_mandatory",
                "Dedicated heatsink: thermal resistance directly sets the maximum dissipation"),
            _fx("heatsink_dimensions", "escalate_to_mandatory",
                "Heatsink interface: bolt pattern and tab dimensions must match the existing heatsink")),
       _opt("chassis_mounted", "Chassis-mounted (enclosure wall, metal frame)",
            _fx("thermal_resistance", "escalate_to_primary",
                "Chassis mounting: the thermal path is less controlled than a dedicated heatsink"),
            _fx("heatsink_dimensions", "escalate_to_mandatory",
                "Chassis mounting: bolt pattern and footprint must match the existing drilling")),
       _opt("free_standing", "No heatsink / free-standing",
            _fx("power_rating", "escalate_to_mandatory",
                "Free-standing: power rating is heavily derated from the mounted rating"))),
    _q("forced_airflow", "Is forced airflow present?", 2,
       _opt("yes", "Yes, fan-cooled",
            _fx("power_rating", "escalate_to_primary", "Fan-cooled: use the forced-convection derating curve")),
       _opt("no", "No, natural convection",
            _fx("power_rating", "escalate_to_mandatory",
                "Natural convection: verify thermal margin against the derated power rating"))),
    _q("precision", "Is this a precision or instrumentation application?", 3,
       _opt("yes", "Yes",
            _fx("tolerance", "escalate_to_primary", "Precision application: tighter tolerance matching required"),
            _fx("tcr", "escalate_to_primary", "Precision application: low TCR is critical for measurement stability"),
            _fx("composition", "escalate_to_primary", "Thin film preferred for lower TCR and tighter tolerance")),
       _opt("no", "No")),
    _q("environment", "What environment is this for?", 4,
       _opt("automotive", "Automotive", _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200)),
       _opt("industrial_sulfur", "Industrial, sulfur-rich atmosphere",
            _fx("anti_sulfur", "escalate_to_mandatory",
                "Sulfur-rich environment: anti-sulfur termination prevents open-circuit failures")),
       _opt("standard", "Standard")),
))

MICA_CONTEXT = FamilyContext(("13",), "low", (
    _q("environment", "What environment is this for?", 1,
       _opt("automotive", "Automotive", _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200)),
       _opt("military", "Military / aerospace",
            _fx("mil_spec", "escalate_to_mandatory", "Military or aerospace application: MIL-spec compliance is required")),
       _opt("standard", "Standard / consumer")),
))

AL_ELECTROLYTIC_CONTEXT = FamilyContext(("58",), "moderate", (
    _q("ripple_frequency", "What is the switching / ripple frequency?", 1,
       _opt("120hz", "120Hz (mains rectification)"),
       _opt("high_frequency", "High frequency (switching supply)",
            _fx("ripple_current", "escalate_to_primary",
                "High-frequency switching: ripple current rating rises with frequency, compare at the actual frequency"),
            _fx("esr", "escalate_to_primary", "ESR at the switching frequency sets converter output ripple")),
       _opt("unknown", "Unknown",
            _fx("ripple_current", "add_review_flag",
                "Unknown ripple frequency: verify ripple current rating at the actual operating frequency"))),
    _q("ambient_temp", "What is the actual ambient temperature?", 2,
       _opt("unknown", "Unknown",
            _fx("lifetime", "add_review_flag",
                "Unknown ambient temperature: effective lifetime cannot be calculated (doubles every 10°C below rated)"),
            description="The rated lifetime is used as the hard threshold."),
       allow_free_text=True),
    _q("polarization", "Is this a polarized or non-polarized application?", 3,
       _opt("polarized", "Polarized (DC with consistent polarity)"),
       _opt("non_polarized", "Non-polarized / bipolar (AC coupling)",
            _fx("polarization", "escalate_to_mandatory",
                "Non-polarized application: a polar capacitor fails under reverse voltage"))),
))

ALUMINUM_POLYMER_CONTEXT = FamilyContext(("60",), "moderate", (
    _q("ripple_frequency", "What is the switching / ripple frequency?", 1,
       _opt("120hz", "120Hz (mains rectified)"),
       _opt("high_freq", "Specific high frequency (above 10kHz)",
            _fx("ripple_current", "add_review_flag",
                "High-frequency ripple: the ripple current rating is frequency dependent, verify the correction factor")),
       _opt("unknown", "Unknown",
            _fx("ripple_current", "add_review_flag",
                "Unknown ripple frequency: verify ripple current derating at the actual frequency"))),
    _q("esr_primary", "Is ESR the primary selection criterion?", 2,
       _opt("yes", "Yes, polymer was chosen for ESR",
            _fx("esr", "escalate_to_mandatory", "ESR is why polymer was selected: the replacement must match or beat it")),
       _opt("no", "No, standard selection")),
    _q("environment", "What environment is this for?", 3,
       _opt("automotive", "Automotive", _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200)),
       _opt("standard", "Standard / consumer")),
))

VARISTOR_CONTEXT = FamilyContext(("65",), "moderate", (
    _q("application_type", "What is the transient source / application type?", 1,
       _opt("mains", "AC mains surge protection (lightning, switching)",
            _fx("safety_rating", "escalate_to_mandatory", "AC mains: UL 1449 / IEC 61643 certification is mandatory"),
            _fx("thermal_disconnect", "escalate_to_mandatory",
                "AC mains: UL-listed surge protectors need a thermal disconnect against end-of-life fires"),
            _fx("energy_rating", "escalate_to_primary", "Mains surge: energy rating decides survival of lightning transients"),
            _fx("peak_surge_current", "escalate_to_primary", "Mains surge: 8/20µs peak current must cover the expected surge"),
            _fx("max_continuous_voltage", "escalate_to_primary", "Mains: max continuous AC voltage must cover mains tolerance")),
       _opt("dc_automotive", "DC bus / automotive protection (load dump, inductive spikes)",
            _fx("safety_rating", "not_applicable", "DC or automotive: UL/IEC safety rating is not required"),
            _fx("max_continuous_voltage", "escalate_to_primary", "DC application: max continuous DC voltage is the primary voltage spec"),
            _fx("peak_surge_current", "escalate_to_primary", "DC or automotive: peak surge current must handle expected transients"),
            _fx("response_time", "escalate_to_primary", "DC or automotive: response time matters for fast transient clamping"),
            _fx("leakage_current", "escalate_to_primary", "Battery-powered DC: leakage current draws standby power")),
       _opt("esd", "ESD / signal-line protection",
            _fx("response_time", "escalate_to_mandatory", "ESD protection: sub-nanosecond response time required"),
            _fx("clamping_voltage", "escalate_to_primary", "Signal line: tight clamping protects downstream ICs"),
            _fx("leakage_current", "not_applicable", "ESD: leakage is less critical for signal-line ESD events"),
            _fx("energy_rating", "not_applicable", "ESD: energy rating is secondary for low-energy events"))),
    _q("thermal_disconnect", "Does the original have a thermal disconnect / fuse?", 2,
       _opt("yes", "Yes, has thermal disconnect",
            _fx("thermal_disconnect", "escalate_to_mandatory", "Original has a thermal disconnect: the replacement must too")),
       _opt("no", "No, bare MOV",
            _fx("thermal_disconnect", "not_applicable", "Bare MOV: verify the circuit has external overcurrent protection")),
       _opt("unknown", "Unknown, needs inspection",
            _fx("thermal_disconnect", "add_review_flag",
                "Thermal disconnect status unknown: inspect the original part or the circuit design")),
       condition=QuestionCondition("application_type", frozenset({"mains"}))),
    _q("environment", "Is this in an automotive application?", 3,
       _opt("automotive", "Yes, automotive",
            _fx("aec_q200", "escalate_to_mandatory", _AUTOMOTIVE_Q200),
            _fx("operating_temp", "escalate_to_primary", "Automotive: operating range must cover -40°C to +125°C"),
            _fx("peak_surge_current", "escalate_to_primary", "Automotive: surge ratings must cover ISO 7637 load dump")),
       _opt("no", "No, standard / industrial")),
))

PTC_FUSE_CONTEXT = FamilyContext(("66",), "moderate", (
    _q("circuit_voltage", "What is the maximum circuit voltage?", 1,
       _opt("low", "Low voltage (6V or less)",
            _fx("initial_resistance", "escalate_to_primary", "Low voltage: small series resistance is a large relative drop"),
            _fx("post_trip_resistance", "escalate_to_primary", "Low voltage: resistance creep after cycling eats supply margin")),
       _opt("medium", "Medium voltage (6-60V)",
            _fx("max_voltage", "escalate_to_mandatory", "Vmax must leave margin above the actual circuit voltage")),
       _opt("high", "High voltage (above 60V)",
            _fx("max_voltage", "escalate_to_mandatory", "High voltage: exceeding Vmax causes arcing when tripped")),
       allow_free_text=True),
    _q("ambient_temperature", "What is the ambient operating temperature?", 2,
       _opt("specific_temp", "Elevated temperature (above 40°C)",
            _fx("hold_current", "escalate_to_mandatory", "Elevated ambient: hold current derates significantly"),
            _fx("trip_current", "escalate_to_primary", "Elevated ambient: trip current derates too, moving the protection point"),
            _fx("operating_temp", "escalate_to_mandatory", "Elevated ambient: the operating range must cover the environment")),
       _opt("room_temp", "Room temperature (~25°C)"),
       _opt("unknown", "Unknown",
            _fx("operating_temp", "add_review_flag", "Unknown ambient: verify hold and trip derating before finalizing"))),
    _q("fault_frequency", "Will the fuse experience frequent trip/reset cycles?", 3,
       _opt("frequent", "Frequent (part of normal operation)",
            _fx("endurance_cycles", "escalate_to_mandatory", "Frequent tripping: cycle endurance is critical"),
            _fx("post_trip_resistance", "escalate_to_mandatory", "Frequent tripping: post-trip resistance creep accumulates"),
            _fx("initial_resistance", "escalate_to_primary", "Frequent cycling: initial resistance is the baseline for creep")),
       _opt("rare", "Rare (emergency protection only)")),
))

FERRITE_BEAD_CONTEXT = FamilyContext(("70",), "high", (
    _q("signal_or_power", "Is this ferrite bead on a power rail or a signal line?", 1,
       _opt("power", "Power rail",
            _fx("rated_current", "escalate_to_primary", "Power rail: rated current must exceed peak load current with margin"),
            _fx("dcr", "escalate_to_primary", "Power rail: DCR causes supply voltage drop")),
       _opt("signal", "Signal line",
            _fx("impedance_100mhz", "add_review_flag",
                "Signal line: verify the impedance curve is transparent at the signal frequency"),
            _fx("dcr", "not_applicable", "Signal line: DCR matters little at low DC current"))),
    _q("operating_current", "What is the actual DC operating current (peak)?", 2,
       _opt("unknown", "Unknown / varies",
            _fx("impedance_100mhz", "add_review_flag",
                "Impedance falls with DC bias: check the manufacturer bias curve at operating current")),
       allow_free_text=True),
    _q("signal_frequency", "What is the signal frequency?", 3,
       _opt("broadband", "Broadband / unknown",
            _fx("impedance_100mhz", "add_review_flag",
                "Verify the impedance curve passes the signal band and attenuates its harmonics")),
       condition=QuestionCondition("signal_or_power", frozenset({"signal"})),
       allow_free_text=True),
))

POWER_INDUCTOR_CONTEXT = FamilyContext(("71",), "moderate", (
    _q("circuit_type", "What type of converter/circuit is this in?", 1,
       _opt("switcher", "Buck/boost/buck-boost switching converter",
            _fx("saturation_current", "escalate_to_mandatory",
                "Switching converter: Isat is critical, hard-saturating cores cause current runaway"),
            _fx("core_material", "escalate_to_primary", "Switching converter: hard vs soft saturation affects stability"),
            _fx("inductance_vs_dc_bias", "escalate_to_primary", "Switching converter: verify inductance retained at operating current"),
            _fx("shielding", "escalate_to_primary", "Switching converter: shielded parts keep EMI down")),
       _opt("linear", "LDO output / general filtering",
            _fx("rated_current", "escalate_to_primary", "Filtering: thermal rating (Irms) is the primary current spec"),
            _fx("core_material", "not_applicable", "Filtering: core saturation behavior matters less")),
       _opt("emi", "EMI filter / common mode",
            _fx("construction_type", "add_review_flag",
                "EMI filtering: a common mode choke or ferrite bead may be the better part"))),
    _q("operating_current", "What is the actual operating DC current?", 2,
       _opt("unknown", "Unknown",
            _fx("saturation_current", "add_review_flag", "Unknown operating current: verify Isat margin at actual load"),
            _fx("inductance_vs_dc_bias", "add_review_flag", "Unknown operating current: inductance derating cannot be evaluated")),
       allow_free_text=True),
    _q("shielding_required", "Is EMI shielding required?", 3,
       _opt("yes", "Yes, shielded inductor required",
            _fx("shielding", "escalate_to_mandatory", "Shielded inductor required: unshielded cannot replace shielded")),
       _opt("no", "No / not sure")),
))

RF_INDUCTOR_CONTEXT = FamilyContext(("72",), "high", (
    _q("frequency_band", "What is the operating frequency?", 1,
       _opt("low_rf", "Low RF (100kHz-30MHz)",
            _fx("srf", "escalate_to_primary", "Low RF: SRF must be at least 10x the operating frequency"),
            _fx("q_factor", "escalate_to_primary", "Low RF: Q sets filter selectivity")),
       _opt("high_rf", "High RF / microwave (above 30MHz)",
            _fx("q_factor", "escalate_to_mandatory", "High RF: lower Q means insertion loss and detuning"),
            _fx("srf", "escalate_to_mandatory", "High RF: above SRF the inductor turns capacitive"),
            _fx("core_material", "escalate_to_mandatory", "High RF: air or ceramic core required, ferrite loss is excessive")),
       _opt("broadband", "Broadband / wideband",
            _fx("srf", "escalate_to_mandatory", "Broadband: SRF must sit well above the whole band"),
            _fx("q_factor", "escalate_to_primary", "Broadband: Q must be adequate across the band"),
            _fx("inductance_tolerance", "escalate_to_primary", "Broadband: inductance tolerance shifts the whole response")),
       _opt("unknown", "Unknown",
            _fx("srf", "add_review_flag", "Unknown frequency: verify SRF before finalizing"),
            _fx("q_factor", "add_review_flag", "Unknown frequency: verify Q for the application")),
       allow_free_text=True),
    _q("q_requirement", "What Q factor is required?", 2,
       _opt("high_q", "High Q (above 50)",
            _fx("q_factor", "escalate_to_mandatory", "High Q: check Q at the operating frequency, not the datasheet peak"),
            _fx("core_material", "escalate_to_mandatory", "High Q: air or ceramic core required"),
            _fx("shielding", "add_review_flag", "High Q: shielding adds eddy current loss, verify Q")),
       _opt("moderate_q", "Moderate Q (20-50)",
            _fx("q_factor", "escalate_to_primary", "Moderate Q: check Q at the operating frequency")),
       _opt("low_q", "Low Q / don't care")),
    _q("shielding_required", "Is EMI shielding required?", 3,
       _opt("yes", "Yes, shielded required",
            _fx("shielding", "escalate_to_mandatory", "EMI-sensitive circuit: shielded inductor required"),
            _fx("q_factor", "add_review_flag", "Shielding lowers Q through eddy currents, verify Q")),
       _opt("no", "No / don't know")),
))

# =============================================================================
# DISCRETE SEMICONDUCTORS
# =============================================================================

SCHOTTKY_CONTEXT = FamilyContext(("B2",), "high", (
    _q("low_voltage", "Is this a low-voltage application (supply voltage 12V or less)?", 1,
       _opt("yes", "Yes",
            _fx("vf", "escalate_to_mandatory", "At 12V or less every 50mV of forward drop is significant"),
            _fx("ir_leakage", "not_applicable", "Reverse leakage is secondary at low reverse voltage")),
       _opt("no", "No",
            _fx("ir_leakage", "escalate_to_primary",
                "At higher voltages Ir x Vr is significant leakage power with thermal runaway risk"))),
    _q("ambient_temperature", "What is the operating or ambient temperature environment?", 2,
       _opt("high_ambient", "High ambient (85°C or above)",
            _fx("ir_leakage", "escalate_to_mandatory", "Schottky leakage roughly doubles every 10°C"),
            _fx("rth_jc", "escalate_to_primary", "Thermal resistance sets junction temperature rise"),
            _fx("rth_ja", "escalate_to_primary", "Without a heatsink Rth(ja) decides if leakage power is safe"),
            _fx("tj_max", "escalate_to_primary", "Higher Tj(max) gives headroom against leakage-driven heating")),
       _opt("room_temp", "Room temperature")),
    _q("semiconductor_material", "Is this a silicon or silicon carbide (SiC) Schottky diode?", 3,
       _opt("silicon", "Silicon"),
       _opt("sic", "Silicon carbide",
            _fx("semiconductor_material", "escalate_to_mandatory",
                "SiC Schottky cannot be replaced by silicon at 600V and above"),
            _fx("ir_leakage", "not_applicable", "SiC leakage is far more stable over temperature")),
       _opt("unknown", "Unknown",
            _fx("semiconductor_material", "add_review_flag",
                "Determine Si vs SiC from the voltage rating: 300V and above is almost certainly SiC"))),
    _q("parallel_operation", "Are diodes operating in parallel for higher current?", 4,
       _opt("yes", "Yes",
            _fx("vf_tempco", "escalate_to_primary", "Vf tempco decides whether paralleled diodes share current"),
            _fx("vf", "escalate_to_mandatory", "Vf mismatch between paralleled diodes causes unequal sharing")),
       _opt("no", "No")),
    _q("automotive", "Is this an automotive application?", 5,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("operating_temp", "escalate_to_primary", "Automotive requires -40°C to +125°C or wider")),
       _opt("no", "No")),
))

MOSFET_CONTEXT = FamilyContext(("B5",), "high", (
    _q("switching_topology", "What switching topology does this MOSFET operate in?", 1,
       _opt("hard_switching", "Hard switching",
            _fx("qgd", "escalate_to_primary", "Hard switching: Miller charge dominates switching loss"),
            _fx("crss", "escalate_to_primary", "Hard switching: Crss couples drain dV/dt into the gate")),
       _opt("soft_switching", "Soft switching / resonant",
            _fx("coss", "escalate_to_mandatory", "Resonant topology: Coss is part of the resonant tank")),
       _opt("linear_mode", "Linear mode",
            _fx("soa", "escalate_to_mandatory", "Linear mode: SOA curves are the critical specification"),
            _fx("vgs_th", "escalate_to_primary", "Linear mode: Vgs(th) sets the partial-conduction operating point")),
       _opt("dc_low_frequency", "DC / low frequency",
            _fx("rds_on", "escalate_to_mandatory", "DC operation: Rds(on) dominates total losses"),
            _fx("qg", "not_applicable", "DC operation: gate charge switching losses are negligible"),
            _fx("qgd", "not_applicable", "DC operation: Miller charge switching losses are negligible"),
            _fx("qgs", "not_applicable", "DC operation: Qgs switching losses are negligible"))),
    _q("synchronous_rectification", "Is this MOSFET used in synchronous rectification?", 2,
       _opt("yes_above_50khz", "Yes, at 50kHz or above",
            _fx("body_diode_trr", "escalate_to_mandatory",
                "Synchronous rectification at 50kHz or above: body diode trr must be verified", True),
            _fx("body_diode_vf", "escalate_to_primary", "Body diode Vf sets dead-time conduction loss")),
       _opt("yes_below_50khz", "Yes, below 50kHz",
            _fx("body_diode_trr", "escalate_to_primary", "Below 50kHz body diode trr matters but is not blocking"),
            _fx("body_diode_vf", "escalate_to_primary", "Body diode Vf sets dead-time conduction loss")),
       _opt("no", "No")),
    _q("parallel_operation", "Are MOSFETs operated in parallel for current sharing?", 3,
       _opt("yes", "Yes",
            _fx("vgs_th", "escalate_to_primary", "Parallel operation: Vgs(th) spread causes uneven sharing")),
       _opt("no", "No")),
    _q("drive_voltage", "What gate drive voltage does the circuit provide?", 4,
       _opt("logic_level", "Logic level (3.3V / 5V)",
            _fx("vgs_th", "escalate_to_primary", "Logic-level drive: Vgs(th) max must sit well below the drive voltage")),
       _opt("standard", "Standard (10-12V)"),
       _opt("high_voltage_sic", "SiC / negative turn-off",
            _fx("vgs_max", "escalate_to_primary", "Negative turn-off drive: Vgs(max) must cover the negative rail"))),
    _q("automotive", "Is this an automotive application?", 5,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("avalanche_energy", "escalate_to_primary", "Automotive: avalanche energy decides UIS survival"),
            description="AEC-Q101 becomes mandatory and avalanche ruggedness becomes important."),
       _opt("no", "No")),
))

_DISCRETE_AUTOMOTIVE_TEMP = "Automotive requires -40°C to +125°C (or +150°C under-hood)"

RECTIFIER_CONTEXT = FamilyContext(("B1",), "high", (
    _q("switching_frequency", "What is the switching frequency of this circuit?", 1,
       _opt("mains_50_60hz", "50/60Hz (mains rectification)",
            _fx("trr", "not_applicable", "At 50/60Hz even 5µs trr is negligible against the period"),
            _fx("qrr", "not_applicable", "Reverse recovery charge is irrelevant at mains frequency"),
            _fx("recovery_behavior", "not_applicable", "Soft vs snappy recovery is irrelevant at mains frequency"),
            _fx("cj", "not_applicable", "Junction capacitance is irrelevant at mains frequency"),
            _fx("vf", "escalate_to_primary", "At 50/60Hz conduction loss (Vf) dominates")),
       _opt("low_freq_1k_50k", "1kHz-50kHz (motor drives, low-frequency switching)",
            _fx("trr", "escalate_to_primary", "At 1-50kHz recovery time starts adding switching loss"),
            _fx("recovery_behavior", "add_review_flag", "Snappy recovery spikes scale with frequency"),
            _fx("vf", "escalate_to_primary", "Vf and trr are balanced at these frequencies")),
       _opt("smps_50k_500k", "50kHz-500kHz (SMPS, DC-DC converters)",
            _fx("trr", "escalate_to_mandatory", "At 50-500kHz switching loss dominates, ultrafast recovery is needed"),
            _fx("qrr", "escalate_to_mandatory", "Qrr is the best predictor of switching loss at these frequencies"),
            _fx("recovery_behavior", "escalate_to_primary", "Snappy recovery causes EMI and ringing in an SMPS"),
            _fx("cj", "add_review_flag", "Junction capacitance adds switching loss above 100kHz"),
            _fx("vf", "not_applicable", "Faster recovery outweighs a higher Vf here")),
       _opt("above_500k", "Above 500kHz",
            _fx("trr", "escalate_to_mandatory", "Above 500kHz a silicon rectifier is unusual; consider a Schottky"),
            _fx("qrr", "escalate_to_mandatory", "Any reverse recovery above 500kHz causes severe loss"),
            _fx("recovery_behavior", "escalate_to_mandatory", "Snappy recovery is destructive above 500kHz"),
            _fx("cj", "escalate_to_primary", "Junction capacitance is a primary loss mechanism above 500kHz"))),
    _q("circuit_topology", "What is the circuit topology or function of this diode?", 2,
       _opt("power_supply_rectifier", "Power supply rectifier (half/full-bridge, center-tap)",
            _fx("ifsm", "escalate_to_primary", "Capacitor inrush at power-on makes Ifsm critical"),
            _fx("configuration", "escalate_to_mandatory", "Single, dual or bridge configuration must match the circuit")),
       _opt("freewheeling_clamp", "Freewheeling / clamp diode (inductor or relay coil)",
            _fx("trr", "escalate_to_mandatory", "Inductive turn-off needs fast or ultrafast recovery"),
            _fx("vrrm", "escalate_to_mandatory", "Vrrm must cover the inductive spike, not just the supply"),
            _fx("ifsm", "escalate_to_primary", "Must carry peak inductor current while clamping"),
            _fx("vf", "not_applicable", "The diode conducts only briefly, Vf is less critical")),
       _opt("oring_redundant", "OR-ing / redundant power",
            _fx("vf", "escalate_to_mandatory", "Vf mismatch unbalances current between redundant supplies"),
            _fx("ir_leakage", "escalate_to_primary", "The idle diode is reverse biased continuously, leakage drains standby"),
            _fx("trr", "not_applicable", "OR-ing diodes rarely switch fast, recovery time seldom matters")),
       _opt("reverse_polarity", "Reverse polarity protection",
            _fx("vf", "escalate_to_mandatory", "Vf is a permanent loss from the supply"),
            _fx("trr", "not_applicable", "The diode does not switch in normal operation"),
            _fx("qrr", "not_applicable", "No switching events, Qrr is irrelevant"))),
    _q("low_voltage", "Is this a low-voltage application (supply voltage 12V or less)?", 3,
       _opt("yes", "Yes, supply 12V or less",
            _fx("vf", "escalate_to_mandatory", "At 12V or less Vf has an outsized efficiency impact")),
       _opt("no", "No, supply above 12V")),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("operating_temp", "escalate_to_primary", _DISCRETE_AUTOMOTIVE_TEMP)),
       _opt("no", "No")),
))

ZENER_CONTEXT = FamilyContext(("B3",), "high", (
    _q("zener_function", "What is the primary function of this Zener diode?", 1,
       _opt("clamping", "Voltage clamping / overvoltage protection",
            _fx("tc", "not_applicable", "Clamping: stability over temperature is not a concern"),
            _fx("zzt", "not_applicable", "Clamping: the voltage need not be precise, dynamic impedance is irrelevant"),
            _fx("zzk", "not_applicable", "Clamping: knee impedance is irrelevant"),
            _fx("regulation_type", "not_applicable", "Clamping: breakdown noise is irrelevant")),
       _opt("reference", "Voltage reference / precision bias",
            _fx("tc", "escalate_to_primary", "Reference: TC sets voltage stability over temperature"),
            _fx("zzt", "escalate_to_primary", "Reference: lower Zzt keeps the voltage steady as current varies"),
            _fx("vz_tolerance", "escalate_to_mandatory", "Reference: tight tolerance (±2% or ±1%) required"),
            _fx("regulation_type", "add_review_flag", "Avalanche breakdown above 5V is noisier than Zener breakdown")),
       _opt("esd_protection", "ESD protection on signal line",
            _fx("cj", "escalate_to_primary", "Signal-line protection: Cj degrades signal integrity"),
            _fx("ir_leakage", "escalate_to_primary", "The Zener sits across the signal line, leakage loads it"),
            _fx("tc", "not_applicable", "ESD protection: temperature coefficient is irrelevant"),
            _fx("zzt", "not_applicable", "ESD protection: dynamic impedance is irrelevant")),
       _opt("level_shifting", "Voltage level shifting",
            _fx("zzt", "escalate_to_primary", "Level shifting: Zzt sets how much the shift moves with current"),
            _fx("tc", "escalate_to_primary", "Level shifting: the shift must hold over temperature"))),
    _q("reference_precision", "What voltage precision/stability is needed for this reference?", 2,
       _opt("high", "High precision (below 0.1% over temperature)",
            _fx("tc", "escalate_to_mandatory", "High precision: TC must be 0.01%/°C or better"),
            _fx("vz_tolerance", "escalate_to_mandatory", "High precision: ±1% tolerance or better"),
            _fx("zzt", "escalate_to_mandatory", "High precision: dynamic impedance is a hard limit")),
       _opt("moderate", "Moderate precision (0.1-1%)",
            _fx("tc", "escalate_to_primary", "Moderate precision: TC of 0.05%/°C is sufficient"),
            _fx("vz_tolerance", "escalate_to_primary", "Moderate precision: ±2% tolerance")),
       _opt("coarse", "Coarse reference (above 1%)"),
       condition=QuestionCondition("zener_function", frozenset({"reference"}))),
    _q("signal_speed", "What is the signal speed on the protected line?", 3,
       _opt("high_speed", "High-speed digital (USB 2.0+, HDMI, SPI above 10MHz)",
            _fx("cj", "escalate_to_mandatory", "High-speed line: Cj must not exceed the original")),
       _opt("low_speed", "Low-speed digital or analog (I2C, UART, GPIO, sensors)"),
       condition=QuestionCondition("zener_function", frozenset({"esd_protection"}))),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("operating_temp", "escalate_to_primary", _DISCRETE_AUTOMOTIVE_TEMP)),
       _opt("no", "No")),
))

TVS_CONTEXT = FamilyContext(("B4",), "high", (
    _q("tvs_application", "What is this TVS diode protecting?", 1,
       _opt("power_rail", "Power rail protection",
            _fx("cj", "not_applicable", "Power rail: junction capacitance is irrelevant"),
            _fx("ppk", "escalate_to_mandatory", "Power rail: peak pulse power is the primary protection metric"),
            _fx("ipp", "escalate_to_mandatory", "Power rail: peak pulse current sets surge handling"),
            _fx("esd_rating", "not_applicable", "Power rails see surges, not ESD")),
       _opt("signal_line", "Signal-line protection (USB, HDMI, Ethernet, SPI, I2C)",
            _fx("cj", "escalate_to_mandatory", "Signal line: Cj degrades signal integrity in normal operation"),
            _fx("esd_rating", "escalate_to_mandatory", "Signal line: ESD rating is the primary spec"),
            _fx("configuration", "escalate_to_mandatory", "Steering arrays reach the lowest Cj; topology sets clamping"),
            _fx("ppk", "not_applicable", "Signal-line TVS sees ESD pulses, not power surges")),
       _opt("automotive_bus", "Automotive bus protection (CAN, LIN, FlexRay)",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("surge_standard", "escalate_to_mandatory", "Automotive transients: must meet the ISO 7637 load dump profile"),
            _fx("cj", "escalate_to_primary", "Automotive bus: capacitance must suit the bus speed"),
            _fx("operating_temp", "escalate_to_mandatory", _DISCRETE_AUTOMOTIVE_TEMP))),
    _q("transient_source", "What type of transient is this TVS protecting against?", 2,
       _opt("esd", "ESD (IEC 61000-4-2)",
            _fx("esd_rating", "escalate_to_mandatory", "ESD: the IEC 61000-4-2 rating is the primary spec"),
            _fx("response_time", "escalate_to_primary", "ESD rise time is about 1ns, package parasitics matter")),
       _opt("power_surge", "Lightning / power surge (IEC 61000-4-5, 8/20µs)",
            _fx("ppk", "escalate_to_mandatory", "Power surge: Ppk at the 8/20µs waveform is the primary spec"),
            _fx("surge_standard", "escalate_to_primary", "Verify IEC 61000-4-5 compliance"),
            _fx("cj", "not_applicable", "Power surge: capacitance is irrelevant")),
       _opt("telecom", "Telecom lightning (GR-1089)",
            _fx("surge_standard", "escalate_to_mandatory", "Telecom: GR-1089 compliance is mandatory"),
            _fx("ppk", "escalate_to_mandatory", "Telecom surge: very high energy needs adequate Ppk")),
       _opt("automotive_transient", "Automotive transients (ISO 7637 load dump)",
            _fx("surge_standard", "escalate_to_mandatory", "Automotive: ISO 7637 compliance is mandatory"),
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("ppk", "escalate_to_mandatory", "Load dump is a long, high-energy transient"))),
    _q("interface_speed", "What is the signal speed on the protected line?", 3,
       _opt("high_speed", "High-speed (USB 3.x, HDMI 2.x, PCIe, above 1Gbps)",
            _fx("cj", "escalate_to_mandatory", "Above 1Gbps Cj must be below 1pF per line"),
            _fx("configuration", "escalate_to_mandatory", "Steering diode topology is preferred at the highest speeds")),
       _opt("medium_speed", "Medium-speed (USB 2.0, 100BASE-T, SPI above 10MHz)",
            _fx("cj", "escalate_to_mandatory", "Medium speed: Cj should be below 5pF per line")),
       _opt("low_speed", "Low-speed (I2C, UART, CAN, GPIO, below 10MHz)"),
       condition=QuestionCondition("tvs_application", frozenset({"signal_line"}))),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("surge_standard", "escalate_to_primary", "Automotive: ISO 7637 compliance for transient profiles"),
            _fx("operating_temp", "escalate_to_primary", _DISCRETE_AUTOMOTIVE_TEMP)),
       _opt("no", "No")),
))

BJT_CONTEXT = FamilyContext(("B6",), "high", (
    _q("operating_mode", "What is the operating mode of this BJT?", 1,
       _opt("saturated_switching", "Saturated switching (logic, relay, solenoid or LED driver)",
            _fx("tst", "escalate_to_primary", "Saturated switching: storage time is the main speed limit"),
            _fx("vce_sat", "escalate_to_primary", "Saturated switching: Vce(sat) sets conduction loss"),
            _fx("toff", "escalate_to_primary", "Saturated switching: turn-off time sets the off transition"),
            _fx("ft", "not_applicable", "Saturated switching: ft is a forward-active parameter")),
       _opt("linear_analog", "Linear / analog (amplifier, buffer, regulator, current mirror)",
            _fx("tst", "not_applicable", "Linear mode never saturates, storage time is irrelevant"),
            _fx("ton", "not_applicable", "Linear mode: switching times are irrelevant"),
            _fx("toff", "not_applicable", "Linear mode: switching times are irrelevant"),
            _fx("hfe", "escalate_to_mandatory", "Linear mode: hFE at the operating Ic is the critical spec"),
            _fx("ft", "escalate_to_mandatory", "Linear mode: ft sets amplifier bandwidth"),
            _fx("soa", "escalate_to_mandatory", "Linear mode: SOA with second breakdown is the critical safety spec"),
            _fx("vce_sat", "not_applicable", "Linear mode does not reach saturation")),
       _opt("class_ab_pair", "Class AB / push-pull output stage",
            _fx("hfe", "escalate_to_mandatory", "Class AB: hFE must match between NPN and PNP halves"),
            _fx("soa", "escalate_to_mandatory", "Class AB: verify SOA at the quiescent operating point"),
            _fx("ft", "escalate_to_primary", "Class AB: ft matching sets slew symmetry"),
            _fx("vbe_sat", "add_review_flag", "Class AB: Vbe matching sets crossover distortion"))),
    _q("switching_frequency", "What is the switching frequency?", 2,
       _opt("low_lt_10khz", "Low frequency (below 10kHz)"),
       _opt("medium_10k_100k", "Medium frequency (10kHz-100kHz)",
            _fx("tst", "escalate_to_primary", "10-100kHz: storage time must fit inside the off period"),
            _fx("ft", "escalate_to_primary", "10-100kHz: ft matters for acceptable transitions"),
            description="Storage time becomes a meaningful constraint."),
       _opt("high_gt_100khz", "High frequency (above 100kHz)",
            _fx("tst", "escalate_to_mandatory", "Above 100kHz storage time is the binding switching limit", True),
            _fx("ton", "escalate_to_primary", "Above 100kHz turn-on time affects duty cycle accuracy"),
            _fx("toff", "escalate_to_mandatory", "Above 100kHz turn-off time must be verified"),
            _fx("ft", "escalate_to_mandatory", "Above 100kHz ft sets transition speed")),
       condition=QuestionCondition("operating_mode", frozenset({"saturated_switching"}))),
    _q("complementary_pair", "Is this a complementary pair application (NPN + PNP paired)?", 3,
       _opt("yes_complementary", "Yes, NPN and PNP are paired",
            _fx("hfe", "add_review_flag", "Complementary pair: match hFE with the other half"),
            _fx("vbe_sat", "add_review_flag", "Complementary pair: Vbe must match the other half"),
            _fx("ft", "add_review_flag", "Complementary pair: ft mismatch gives asymmetric slew")),
       _opt("no_single_device", "No, single transistor or same-polarity pair"),
       condition=QuestionCondition("operating_mode", frozenset({"class_ab_pair", "linear_analog"}))),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes (AEC-Q101 required)", _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101)),
       _opt("no", "No")),
))

IGBT_CONTEXT = FamilyContext(("B7",), "high", (
    _q("switching_frequency", "What is the IGBT switching frequency?", 1,
       _opt("low_lt_20khz", "Low (below 20kHz)",
            _fx("vce_sat", "escalate_to_mandatory", "Below 20kHz conduction loss dominates; Vce(sat) decides total loss")),
       _opt("medium_20k_50k", "Medium (20-50kHz)",
            _fx("igbt_technology", "escalate_to_primary", "20-50kHz: field-stop gives the best Vce(sat) vs Eoff trade-off"),
            _fx("eoff", "escalate_to_mandatory", "20-50kHz: Eoff x fsw must fit the thermal budget")),
       _opt("high_50k_100k", "High (50-100kHz)",
            _fx("eoff", "escalate_to_mandatory", "50-100kHz: Eoff x fsw dominates total loss", True),
            _fx("eon", "escalate_to_mandatory", "50-100kHz: Eon is a large share of switching loss"),
            _fx("qg", "escalate_to_primary", "50-100kHz: gate drive power Qg x Vge x fsw becomes significant"),
            _fx("igbt_technology", "escalate_to_mandatory", "50-100kHz: only field-stop tail current is short enough")),
       _opt("above_100khz", "Above 100kHz",
            _fx("eoff", "add_review_flag", "Above 100kHz a SiC MOSFET is almost certainly the better device"),
            _fx("eon", "add_review_flag", "Above 100kHz review the total switching loss budget"))),
    _q("switching_topology", "Is this a hard-switching or soft-switching (resonant) application?", 2,
       _opt("hard_switching", "Hard switching",
            _fx("eon", "escalate_to_primary", "Hard switching: Eon includes diode reverse recovery"),
            _fx("eoff", "escalate_to_primary", "Hard switching: Eoff with tail current is the dominant loss")),
       _opt("soft_switching", "Soft switching (ZVS / resonant)",
            _fx("eon", "not_applicable", "ZVS turn-on removes Eon"),
            _fx("eoff", "escalate_to_primary", "Soft switching still turns off under current"))),
    _q("parallel_operation", "Are multiple IGBTs operated in parallel for current sharing?", 3,
       _opt("yes", "Yes",
            _fx("igbt_technology", "escalate_to_mandatory",
                "Parallel operation: technology must match, PT and NPT have opposite Vce(sat) tempco"),
            _fx("vge_th", "escalate_to_primary", "Parallel operation: Vge(th) mismatch unbalances dynamic sharing"),
            _fx("vce_sat", "add_review_flag", "Parallel operation: Vce(sat) spread sets static sharing")),
       _opt("no", "No")),
    _q("short_circuit_protection", "Does the application require short-circuit withstand capability?", 4,
       _opt("yes_desat", "Yes (desaturation protection)",
            _fx("tsc", "escalate_to_mandatory", "tsc must exceed the gate driver desaturation response time", True)),
       _opt("no", "No")),
    _q("automotive", "Is this an automotive or traction application?", 5,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("tsc", "escalate_to_mandatory", "Traction inverters need short-circuit withstand for fault protection", True),
            _fx("tj_max", "escalate_to_primary", "Automotive: 175°C Tj(max) is typical for sealed enclosures")),
       _opt("no", "No")),
))

_DIAC_NO_GATE = "DIAC: two-terminal device with no gate"

THYRISTOR_CONTEXT = FamilyContext(("B8",), "high", (
    _q("device_subtype", "What type of thyristor device is this?", 1,
       _opt("scr", "SCR",
            _fx("quadrant_operation", "not_applicable", "SCR: quadrant operation is a TRIAC-only parameter"),
            _fx("snubberless", "not_applicable", "SCR: snubberless rating is a TRIAC-only parameter")),
       _opt("triac", "TRIAC",
            _fx("tq", "not_applicable", "TRIAC: tq is an SCR-only parameter")),
       _opt("diac", "DIAC",
            _fx("gate_sensitivity", "not_applicable", _DIAC_NO_GATE),
            _fx("igt", "not_applicable", _DIAC_NO_GATE),
            _fx("vgt", "not_applicable", _DIAC_NO_GATE),
            _fx("ih", "not_applicable", "DIAC: holding current follows from breakover, not the gate"),
            _fx("il", "not_applicable", _DIAC_NO_GATE),
            _fx("tgt", "not_applicable", _DIAC_NO_GATE),
            _fx("quadrant_operation", "not_applicable", _DIAC_NO_GATE),
            _fx("tq", "not_applicable", "DIAC: no circuit-commutated turn-off time"),
            _fx("snubberless", "not_applicable", "DIAC: snubberless rating is a TRIAC-only parameter"))),
    _q("application_type", "What is the primary application for this thyristor?", 2,
       _opt("ac_phase_control", "AC phase control"),
       _opt("crowbar_dc", "Crowbar / forced-commutation DC",
            _fx("tq", "escalate_to_mandatory", "Forced commutation: tq limits the switching frequency", True)),
       _opt("ac_zero_cross", "AC zero-cross switching",
            _fx("ih", "escalate_to_primary", "Zero-cross switching: Ih decides conduction through the zero crossing")),
       _opt("motor_soft_start", "Motor soft-start",
            _fx("itsm", "escalate_to_primary", "Soft-start: locked-rotor current is 6-10x rated for seconds"),
            _fx("i2t", "escalate_to_primary", "Soft-start: fuse I²t must stay below the device I²t"))),
    _q("snubber_circuit", "Does the PCB design include an RC snubber circuit across the thyristor?", 3,
       _opt("no_snubber", "No snubber",
            _fx("snubberless", "escalate_to_mandatory", "No snubber on the PCB: the replacement must be snubberless rated", True),
            _fx("dv_dt", "escalate_to_mandatory", "No snubber: dV/dt immunity is the only guard against false triggering")),
       _opt("snubber_present", "Snubber present")),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes", _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101)),
       _opt("no", "No")),
))

JFET_CONTEXT = FamilyContext(("B9",), "high", (
    _q("application_domain", "What is the primary application domain for this JFET?", 1,
       _opt("audio_low_frequency", "Audio / low frequency",
            _fx("fc_1f_corner", "escalate_to_primary", "Audio: the 1/f corner is the differentiating spec"),
            _fx("noise_figure", "escalate_to_primary", "Audio: low-frequency noise figure sets SNR"),
            _fx("ft", "not_applicable", "Audio: ft is irrelevant below 100kHz"),
            _fx("ciss", "not_applicable", "Audio: input capacitance is irrelevant"),
            _fx("crss", "not_applicable", "Audio: Miller effect is negligible below 100kHz")),
       _opt("rf_vhf", "RF / VHF",
            _fx("ft", "escalate_to_primary", "RF: ft must sit well above the operating frequency"),
            _fx("ciss", "escalate_to_primary", "RF: Ciss sets the input matching network"),
            _fx("crss", "escalate_to_primary", "RF: Crss limits bandwidth through the Miller effect"),
            _fx("noise_figure", "escalate_to_primary", "RF: noise figure at frequency sets receiver sensitivity"),
            _fx("fc_1f_corner", "not_applicable", "RF: 1/f noise is irrelevant at MHz frequencies")),
       _opt("ultra_high_z", "Ultra-high impedance input",
            _fx("igss", "escalate_to_mandatory", "Ultra-high impedance: Igss is the critical spec", True),
            _fx("vgs_max", "escalate_to_primary", "Ultra-high impedance: Vgs(max) margin protects the gate junction")),
       _opt("general_purpose", "General purpose")),
    _q("matched_pair", "Does the application require matched-pair JFETs?", 2,
       _opt("yes", "Yes",
            _fx("vp", "add_review_flag", "Matched pair: Vp matching must be tighter than the population range"),
            _fx("idss", "add_review_flag", "Matched pair: Idss mismatch unbalances the pair")),
       _opt("no", "No")),
    _q("automotive", "Is this an automotive application?", 3,
       _opt("yes", "Yes",
            _fx("aec_q101", "escalate_to_mandatory", _AUTOMOTIVE_Q101),
            _fx("igss", "escalate_to_primary", "Automotive: gate leakage doubles every 10°C"),
            _fx("tj_max", "escalate_to_primary", "Automotive: 150°C Tj(max) is the usual minimum")),
       _opt("no", "No")),
))

# =============================================================================
# POWER MANAGEMENT ICS
# =============================================================================

LDO_CONTEXT = FamilyContext(("C1",), "high", (
    _q("output_cap_type", "What type of output capacitor is used on the PCB?", 1,
       _opt("ceramic", "Ceramic (MLCC)",
            _fx("output_cap_compatibility", "escalate_to_mandatory",
                "PCB uses ceramic output capacitors: replacement must be stated as ceramic-stable", True)),
       _opt("tantalum", "Tantalum"),
       _opt("electrolytic", "Aluminum electrolytic"),
       _opt("unknown", "Unknown",
            _fx("output_cap_compatibility", "add_review_flag",
                "Output capacitor type unknown: verify stability with the actual PCB capacitor"))),
    _q("battery_application", "Is this a battery-powered or energy-harvesting application?", 2,
       _opt("yes", "Yes",
            _fx("iq", "escalate_to_primary", "Battery application: Iq dominates sleep-mode current draw", True),
            _fx("vdropout", "escalate_to_primary", "Battery application: lower dropout extends usable battery range")),
       _opt("no", "No")),
    _q("noise_sensitive", "Does the output supply a noise-sensitive analog circuit (ADC, DAC, RF, precision amplifier)?", 3,
       _opt("yes", "Yes",
            _fx("psrr", "escalate_to_primary", "Noise-sensitive load: PSRR decides how much input ripple passes"),
            _fx("vout_accuracy", "escalate_to_primary", "Noise-sensitive load: supply accuracy affects ADC/DAC gain"),
            _fx("load_regulation", "escalate_to_primary", "Noise-sensitive load: load regulation sets dynamic variation")),
       _opt("no", "No")),
    _q("automotive", "Is this an automotive application?", 4,
       _opt("yes", "Yes",
            _fx("aec_q100", "escalate_to_mandatory", "Automotive: AEC-Q100 IC qualification is required"),
            _fx("tj_max", "escalate_to_primary", "Automotive: underhood use typically needs Tj(max) of 150°C")),
       _opt("no", "No")),
    _q("upstream_switching_freq", "What is the upstream switching frequency (if post-regulating a switcher)?", 5,
       _opt("none_dc", "None / DC supply",
            _fx("psrr", "not_applicable", "DC supply: there is no switching ripple to reject")),
       _opt("low_freq", "Below 500kHz",
            _fx("psrr", "escalate_to_primary", "Post-regulating a switcher below 500kHz: verify PSRR at that frequency")),
       _opt("high_freq", "500kHz or above",
            _fx("psrr", "escalate_to_mandatory",
                "Post-regulating a switcher at 500kHz or above: PSRR at the switching frequency is critical", True)),
       _opt("unknown", "Unknown"),
       condition=QuestionCondition("noise_sensitive", frozenset({"yes"})),
       allow_free_text=True),
))

SWITCHING_REGULATOR_CONTEXT = FamilyContext(("C2",), "critical", (
    _q("architecture_type", "Is this an integrated-switch converter or a controller-only design?", 1,
       _opt("integrated_switch", "Integrated switch",
            _fx("gate_drive_current", "not_applicable", "Integrated switch: gate drive is internal to the IC")),
       _opt("controller_only", "Controller only (external MOSFETs)",
            _fx("gate_drive_current", "escalate_to_primary", "Controller: gate drive current sets external MOSFET switching speed")),
       _opt("unknown", "Unknown")),
    _q("comp_redesign", "Can the compensation network be redesigned, or must external components stay unchanged?", 2,
       _opt("can_redesign", "Can redesign",
            _fx("control_mode", "add_review_flag",
                "A control mode change needs a compensation redesign; review the loop before accepting")),
       _opt("cannot_change", "Cannot change"),
       _opt("unknown", "Unknown")),
    _q("automotive", "Is this an automotive application requiring AEC-Q100?", 3,
       _opt("yes", "Yes",
            _fx("aec_q100", "escalate_to_mandatory", "Automotive: AEC-Q100 qualification is required"),
            _fx("tj_max", "escalate_to_primary", "Automotive: underhood use needs Tj(max) of 150°C"),
            _fx("vin_max", "escalate_to_primary", "Automotive: Vin(max) must survive load-dump transients")),
       _opt("no", "No")),
    _q("passive_flexibility", "Can the power inductor and output capacitors be changed, or must they stay as-is?", 4,
       _opt("passives_can_change", "Passives can change"),
       _opt("passives_fixed", "Passives are fixed",
            _fx("fsw", "escalate_to_mandatory", "Fixed passives: switching frequency must match exactly", True)),
       _opt("unknown", "Unknown")),
    _q("high_conversion_ratio", "Does this design have a high voltage conversion ratio (e.g. 12V to 1V buck)?", 5,
       _opt("yes", "Yes",
            _fx("ton_min", "escalate_to_mandatory", "High conversion ratio: required on-time D/fsw must exceed ton_min", True)),
       _opt("no", "No"),
       _opt("unknown", "Unknown"),
       condition=QuestionCondition("architecture_type", frozenset({"integrated_switch", "controller_only"}))),
))

_SHOOT_THROUGH = "Shoot-through safety"

GATE_DRIVER_CONTEXT = FamilyContext(("C3",), "critical", (
    _q("driver_topology", "What driver topology does this application use?", 1,
       _opt("half_bridge", "Half bridge",
            _fx("output_polarity", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: polarity inversion in a half bridge turns both switches on", True),
            _fx("dead_time_control", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: dead-time control prevents simultaneous conduction", True),
            _fx("dead_time", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: replacement dead time must be at least the original", True),
            _fx("propagation_delay", "escalate_to_primary",
                f"{_SHOOT_THROUGH}: extra propagation delay eats into dead time"),
            _fx("bootstrap_diode", "escalate_to_primary",
                "Half bridge: bootstrap diode charges the floating high-side supply")),
       _opt("full_bridge", "Full bridge",
            _fx("output_polarity", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: a full bridge contains two half-bridge legs", True),
            _fx("dead_time_control", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: dead-time control is needed on both legs", True),
            _fx("dead_time", "escalate_to_mandatory",
                f"{_SHOOT_THROUGH}: dead time must be at least the original on both legs", True),
            _fx("propagation_delay", "escalate_to_primary",
                f"{_SHOOT_THROUGH}: propagation delay affects dead-time margin on both legs"),
            _fx("bootstrap_diode", "escalate_to_primary",
                "Full bridge: both high-side drivers need a bootstrap supply")),
       _opt("single", "Single low-side",
            _fx("dead_time_control", "not_applicable", "Single low-side driver: no complementary switching"),
            _fx("dead_time", "not_applicable", "Single low-side driver: dead time does not apply"),
            _fx("bootstrap_diode", "not_applicable", "Single low-side driver: no floating high-side supply")),
       _opt("dual_independent", "Dual independent",
            _fx("dead_time_control", "not_applicable", "Dual independent drivers: dead time is managed externally"),
            _fx("dead_time", "not_applicable", "Dual independent drivers: dead time is managed externally"))),
    _q("power_device_type", "What type of power device does this gate driver control?", 2,
       _opt("silicon_mosfet", "Silicon MOSFET"),
       _opt("igbt", "IGBT",
            _fx("peak_source_current", "escalate_to_primary", "IGBT gate charge is typically 2-5x a comparable MOSFET"),
            _fx("peak_sink_current", "escalate_to_primary", "Weak sink current extends IGBT tail current at turn-off")),
       _opt("sic_mosfet", "SiC MOSFET",
            _fx("vdd_range", "escalate_to_mandatory",
                "SiC MOSFETs need a bipolar gate supply; the VDD range must cover it", True)),
       _opt("gan_hemt", "GaN HEMT",
            _fx("vdd_range", "escalate_to_primary", "GaN HEMTs need a precise gate voltage with little headroom")),
       _opt("unknown", "Unknown")),
    _q("automotive", "Is this an automotive application requiring AEC-Q100?", 3,
       _opt("yes", "Yes",
            _fx("aec_q100", "escalate_to_mandatory", "Automotive: AEC-Q100 qualification is required"),
            _fx("tj_max", "escalate_to_primary", "Automotive: underhood gate drivers need Tj(max) of 150°C"),
            _fx("fault_reporting", "escalate_to_primary", "Automotive: fault reporting may be part of the safety architecture")),
       _opt("no", "No")),
    _q("safety_isolation", "Does this application require safety-rated galvanic isolation?", 4,
       _opt("yes", "Yes",
            _fx("isolation_type", "add_review_flag",
                "Safety-rated isolation: verify isolation voltage, creepage and clearance against the standard"),
            description="Isolation type is already blocking; this adds a review of the isolation ratings."),
       _opt("no", "No"),
       _opt("unknown", "Unknown")),
    _q("high_frequency", "Is the switching frequency greater than 200kHz?", 5,
       _opt("yes", "Yes",
            _fx("rth_ja", "escalate_to_primary", "Above 200kHz driver dissipation scales with switching frequency"),
            _fx("rise_fall_time", "escalate_to_primary", "Above 200kHz rise/fall time is a larger share of the period"),
            _fx("propagation_delay", "escalate_to_primary", "Above 200kHz propagation delay eats more of the dead-time window")),
       _opt("no", "No"),
       _opt("unknown", "Unknown")),
))

# =============================================================================
# ANALOG AND LOGIC ICS
# =============================================================================

_AUTOMOTIVE_Q100 = "AEC-Q100 is mandatory for automotive; unqualified parts are rejected regardless of electrical match"

OPAMP_CONTEXT = FamilyContext(("C4",), "critical", (
    _q("device_function", "What is the primary device function in your circuit?", 1,
       _opt("op_amp", "Op-amp (closed-loop)",
            _fx("output_type", "not_applicable", "Op-amps have push-pull outputs, output type matching does not apply"),
            _fx("response_time", "not_applicable", "Comparator response time does not apply; use GBW and slew rate"),
            description="Closed-loop negative feedback: gain stages, filters, followers."),
       _opt("comparator", "Comparator",
            _fx("gain_bandwidth", "not_applicable", "Comparators run open-loop, GBW is meaningless"),
            _fx("min_stable_gain", "not_applicable", "Comparators are always open-loop"),
            _fx("output_type", "escalate_to_primary", "Comparator: open-drain vs push-pull sets the circuit interface"),
            _fx("response_time", "escalate_to_primary", "Comparator: response time sets switching speed")),
       _opt("instrumentation_amp", "Instrumentation amplifier",
            _fx("output_type", "not_applicable", "In-amps have push-pull outputs"),
            _fx("response_time", "not_applicable", "Comparator response time does not apply to in-amps"),
            _fx("cmrr", "escalate_to_primary", "CMRR is the defining in-amp specification"))),
    _q("source_impedance", "What is the typical source impedance driving the input?", 2,
       _opt("low", "Low",
            _fx("input_noise_voltage", "escalate_to_primary", "Low source impedance: voltage noise dominates total noise")),
       _opt("medium", "Medium", description="Both voltage and current noise contribute."),
       _opt("high", "High (above 100kΩ)",
            _fx("input_type", "escalate_to_mandatory", "Above 100kΩ a bipolar input stage is incompatible", True),
            _fx("input_bias_current", "escalate_to_mandatory", "High source impedance: Ib x Rs creates offset", True))),
    _q("precision_application", "Is this a precision application (offset voltage below 500µV or gain above 100)?", 3,
       _opt("yes", "Yes",
            _fx("avol", "escalate_to_primary", "Precision: gain error is about 1/(Avol x feedback factor)"),
            _fx("input_offset_voltage", "escalate_to_mandatory", "Precision: Vos is the dominant DC error source", True),
            _fx("cmrr", "escalate_to_primary", "Precision: common-mode voltage leaks in at 1/CMRR"),
            _fx("psrr", "escalate_to_primary", "Precision: supply noise leaks in at 1/PSRR"),
            description="High-gain amplification, instrumentation or sensor conditioning."),
       _opt("no", "No")),
    _q("circuit_gain", "What is the minimum closed-loop gain in your circuit?", 4,
       _opt("unity", "Unity (follower)",
            _fx("min_stable_gain", "escalate_to_mandatory", "Decompensated op-amps oscillate at unity gain", True)),
       _opt("low", "Low (2-10)",
            _fx("min_stable_gain", "escalate_to_primary", "Verify the replacement is stable at the actual circuit gain")),
       _opt("high", "High (above 10)"),
       condition=QuestionCondition("device_function", frozenset({"op_amp", "instrumentation_amp"}))),
    _q("automotive", "Is this an automotive application?", 5,
       _opt("yes", "Yes",
            _fx("aec_q100", "escalate_to_mandatory", _AUTOMOTIVE_Q100, True),
            _fx("operating_temp", "escalate_to_primary", "Automotive: the range must meet the AEC-Q100 grade, typically -40°C to +125°C")),
       _opt("no", "No")),
))

LOGIC_IC_CONTEXT = FamilyContext(("C5",), "critical", (
    _q("driving_source", "What is the logic family of the device driving the inputs?", 1,
       _opt("ttl", "TTL",
            _fx("vih", "escalate_to_mandatory", "TTL VOH of 2.4V falls below HC VIH; only TTL-threshold inputs work", True),
            _fx("logic_family", "escalate_to_primary", "TTL driver: HC vs HCT is critical for interface compatibility")),
       _opt("cmos", "CMOS"),
       _opt("mixed", "Mixed",
            _fx("vih", "escalate_to_primary", "Mixed drivers: worst-case VOH of every driver must meet VIH"),
            _fx("vil", "escalate_to_primary", "Mixed drivers: worst-case VOL of every driver must meet VIL"))),
    _q("voltage_interface", "Does this device interface between different voltage domains?", 2,
       _opt("mixed_3v3_5v", "Mixed 3.3V / 5V",
            _fx("input_clamp_diodes", "escalate_to_mandatory",
                "5V signals on non-tolerant 3.3V inputs forward-bias the clamp diode", True),
            _fx("voh", "escalate_to_mandatory", "3.3V VOH cannot meet a 5V HC input threshold", True),
            _fx("supply_voltage", "escalate_to_primary", "Mixed voltage: the supply range must cover the actual rail")),
       _opt("single_domain", "Single domain")),
    _q("bus_application", "Is this device used in a shared bus or multi-driver application?", 3,
       _opt("shared_bus", "Shared bus",
            _fx("output_type", "escalate_to_mandatory", "Shared bus: open-drain and totem-pole outputs are not interchangeable", True),
            _fx("oe_polarity", "escalate_to_mandatory", "Shared bus: inverted OE drives the bus when it should float", True),
            _fx("bus_hold", "escalate_to_primary", "Shared bus: without bus hold, idle lines float")),
       _opt("point_to_point", "Point to point")),
    _q("input_signal_quality", "Are the input signals slow-edged, noisy, or from analog/mechanical sources?", 4,
       _opt("slow_noisy", "Slow or noisy",
            _fx("schmitt_trigger", "escalate_to_mandatory", "Slow edges on a non-Schmitt input cause multiple transitions", True)),
       _opt("clean_digital", "Clean digital")),
    _q("automotive", "Is this an automotive application?", 5,
       _opt("yes", "Yes",
            _fx("aec_q100", "escalate_to_mandatory", _AUTOMOTIVE_Q100, True),
            _fx("operating_temp", "escalate_to_primary", "Automotive: range must meet AEC-Q100 Grade 1, -40°C to +125°C")),
       _opt("no", "No")),
))


CONTEXT_REGISTRY: dict[str, FamilyContext] = {
    family_id: context
    for context in (
        MLCC_CONTEXT,
        MICA_CONTEXT,
        CHIP_RESISTOR_CONTEXT,
        THROUGH_HOLE_CONTEXT,
        CURRENT_SENSE_CONTEXT,
        CHASSIS_MOUNT_CONTEXT,
        AL_ELECTROLYTIC_CONTEXT,
        ALUMINUM_POLYMER_CONTEXT,
        VARISTOR_CONTEXT,
        PTC_FUSE_CONTEXT,
        FERRITE_BEAD_CONTEXT,
        POWER_INDUCTOR_CONTEXT,
        RF_INDUCTOR_CONTEXT,
        RECTIFIER_CONTEXT,
        SCHOTTKY_CONTEXT,
        ZENER_CONTEXT,
        TVS_CONTEXT,
        MOSFET_CONTEXT,
        BJT_CONTEXT,
        IGBT_CONTEXT,
        THYRISTOR_CONTEXT,
        JFET_CONTEXT,
        LDO_CONTEXT,
        SWITCHING_REGULATOR_CONTEXT,
        GATE_DRIVER_CONTEXT,
        OPAMP_CONTEXT,
        LOGIC_IC_CONTEXT,
    )
    for family_id in context.family_ids
}


def get_context_questions(family_id: str) -> FamilyContext | None:
    return CONTEXT_REGISTRY.get(family_id)
