"""Statically declared property catalog for the supported equipment categories.

Each category lists its canonical properties in display order. Aliases are
the alternative header spellings seen in exporting-tool reports.
"""

from __future__ import annotations

from gridrecon.models.catalog import CategoryCatalog, PropertyCatalog, PropertyDescriptor


def _p(
    name: str,
    *aliases: str,
    group: str = "General",
    required: bool = False,
    key: bool = False,
    default: str | None = None,
    description: str = "",
) -> PropertyDescriptor:
    return PropertyDescriptor(
        name=name,
        aliases=aliases,
        group=group,
        required=required or key,
        is_key_component=key,
        default_value=default,
        description=description,
    )


BUS = CategoryCatalog(
    name="Bus",
    source_class="Buses",
    properties=(
        _p("Name", "BusName", "Buses", "Bus ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("AcDc", "AC/DC", default="AC"),
        _p("BaseKV", "Base kV", "Voltage", "Nominal kV", group="Electrical", required=True),
        _p("NoOfPhases", "No of Phases", "Phases", group="Electrical", default="3"),
        _p("Area", group="Location"),
        _p("Zone", group="Location"),
        _p("Manufacturer", "Mfr", group="Physical"),
        _p("Type", "Equipment Type", group="Physical"),
        _p("BusRatingA", "Bus Rating", "Bus Rating (A)", group="Physical"),
        _p("BusBracingKA", "Bus Bracing", "Bus Bracing (kA)", group="Physical"),
    ),
)

LV_BREAKER = CategoryCatalog(
    name="LVBreaker",
    source_class="LV Breakers",
    properties=(
        _p("Name", "LV Breakers", "LVBreakers", "Breaker ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("OnBus", "On Bus", "Bus", group="Identity", required=True),
        _p("BaseKV", "Base kV", group="Electrical"),
        _p("ConnType", "Conn Type", group="Physical"),
        _p("BreakerMfr", "Breaker Mfr", "Manufacturer", group="Physical"),
        _p("BreakerType", "Breaker Type", group="Physical"),
        _p("BreakerStyle", "Breaker Style", group="Physical"),
        _p("FrameA", "Frame (A)", "Frame", group="Protection", required=True),
        _p("TripA", "Trip (A)", "Trip", group="Protection"),
    ),
)

FUSE = CategoryCatalog(
    name="Fuse",
    source_class="Fuses",
    properties=(
        _p("Name", "Fuses", "Fuse ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("OnBus", "On Bus", group="Identity", required=True),
        _p("BaseKV", "Base kV", group="Electrical"),
        _p("FuseMfr", "Fuse Mfr", "Manufacturer", group="Physical"),
        _p("FuseType", "Fuse Type", group="Physical"),
        _p("FuseSize", "Fuse Size", "Size", group="Protection"),
    ),
)

CABLE = CategoryCatalog(
    name="Cable",
    source_class="Cables",
    properties=(
        _p("Name", "Cables", "Cable ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("FromBusID", "From Bus ID", "From Bus", group="Identity", required=True),
        _p("ToBusID", "To Bus ID", "To Bus", group="Identity", required=True),
        _p("LengthFt", "Length", "Length (ft)", group="Physical"),
        _p("Size", "Cable Size", "Conductor Size", group="Physical"),
        _p("Material", "Conductor", group="Physical", default="CU"),
        _p("NoPerPhase", "No per Phase", "Qty/Phase", group="Physical", default="1"),
    ),
)

TRANSFORMER_2W = CategoryCatalog(
    name="Transformer2W",
    source_class="2W Transformers",
    properties=(
        _p("Name", "2W Transformers", "Transformer ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("FromBusID", "From Bus ID", "Primary Bus", group="Identity", required=True),
        _p("ToBusID", "To Bus ID", "Secondary Bus", group="Identity", required=True),
        _p("FromNomKV", "From Nom kV", "Primary kV", group="Electrical"),
        _p("ToNomKV", "To Nom kV", "Secondary kV", group="Electrical"),
        _p("NominalKVA", "Nominal kVA", "kVA", group="Electrical"),
        _p("ImpedancePct", "Z%", "%Z", "Impedance", group="Electrical"),
    ),
)

MOTOR = CategoryCatalog(
    name="Motor",
    source_class="Motors",
    properties=(
        _p("Name", "Motors", "Motor ID", group="Identity", key=True),
        _p("Status", group="Identity", default="On"),
        _p("ToBusID", "To Bus ID", "Bus", group="Identity", required=True),
        _p("BaseKV", "Base kV", group="Electrical"),
        _p("MotorKV", "Motor kV", group="Electrical"),
        _p("HpOrKW", "HP or kW", "HP", group="Electrical"),
        _p("Model", group="Physical"),
    ),
)

ARC_FLASH = CategoryCatalog(
    name="ArcFlash",
    source_class="Arc Flash Scenario Report",
    properties=(
        _p("Bus", "Arc Fault Bus Name", "ArcFaultBusName", "Bus Name", group="Identity", key=True),
        _p("Scenario", group="Identity", key=True),
        _p("WorstCase", "Worst Case", group="Study Results"),
        _p("ArcFaultBusKV", "Arc Fault Bus kV", group="Electrical"),
        _p("UpstreamTripDevice", "Upstream Trip Device Name", group="Protection"),
        _p("BusBoltedFaultKA", "Bus Bolted Fault", "Bus Bolted Fault (kA)", group="Study Results"),
        _p("BusArcFaultKA", "Bus Arc Fault", "Bus Arc Fault (kA)", group="Study Results"),
        _p("TripTime", "Trip Time", "Trip Time (sec)", group="Study Results"),
        _p("IncidentEnergy", "Incident Energy", "Incident Energy (cal/cm2)", group="Study Results"),
        _p("ArcFlashBoundary", "Arc Flash Boundary", "AFB", group="Study Results"),
    ),
)

SHORT_CIRCUIT = CategoryCatalog(
    name="ShortCircuit",
    source_class="Equipment Duty Scenario Report",
    properties=(
        _p("BusName", "Bus Name", "Bus", group="Identity", key=True),
        _p("EquipmentName", "Equipment Name", "Equipment", group="Identity", key=True),
        _p("Scenario", group="Identity", key=True),
        _p("WorstCase", "Worst Case", group="Study Results"),
        _p("FaultType", "Fault Type", group="Electrical"),
        _p("BusBaseKV", "Bus Base kV", group="Electrical"),
        _p("EquipmentManufacturer", "Equipment Manufacturer", group="Physical"),
        _p("HalfCycleRatingKA", "1/2 Cycle Rating", "1/2 Cycle Rating (kA)", group="Protection"),
        _p("HalfCycleDutyKA", "1/2 Cycle Duty", "1/2 Cycle Duty (kA)", group="Study Results"),
        _p("HalfCycleDutyPct", "1/2 Cycle Duty (%)", group="Study Results"),
    ),
)

BUILTIN_CATEGORIES: tuple[CategoryCatalog, ...] = (
    BUS,
    LV_BREAKER,
    FUSE,
    CABLE,
    TRANSFORMER_2W,
    MOTOR,
    ARC_FLASH,
    SHORT_CIRCUIT,
)


def builtin_catalog() -> PropertyCatalog:
    return PropertyCatalog.of(*BUILTIN_CATEGORIES)
