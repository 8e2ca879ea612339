"""Modelos tipados de la telemetría de la bomba de insulina."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import Enum

from pump_codec.errors import UnknownEnumError


class Insulin(int):
    """Insulin amount in milli-units (1000 per unit)."""


class Voltage(int):
    """Battery voltage in millivolts."""


class Ratio(int):
    """Carb ratio whose scale depends on a sibling CarbUnitsType field."""


class Glucose(int):
    """Glucose value in the units of the enclosing record."""


class Symbol(Enum):
    """Closed-set enumeration with a canonical text label per member.

    Members are declared as ``NAME = (code, label)``: the code is the
    value used by the pump, the label is the only accepted text form.
    """

    label: str

    def __new__(cls, code: int, label: str) -> Symbol:
        obj = object.__new__(cls)
        obj._value_ = code
        obj.label = label
        return obj

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_label(cls, text: str) -> Symbol:
        """Return the member whose label is exactly ``text``.

        Raises:
            UnknownEnumError: If no member carries that label.
        """
        for member in cls:
            if member.label == text:
                return member
        raise UnknownEnumError(f"unknown {cls.__name__} ({text!r})")


class CarbUnitsType(Symbol):
    GRAMS = (1, "Grams")
    EXCHANGES = (2, "Exchanges")


class GlucoseUnitsType(Symbol):
    MG_PER_DECILITER = (1, "mg/dL")
    MMOL_PER_LITER = (2, "μmol/L")


class TempBasalType(Symbol):
    ABSOLUTE = (0, "Absolute")
    PERCENT = (1, "Percent")


class HistoryRecordType(Symbol):
    """Op-code of a pump history record (first byte of its raw data)."""

    BOLUS = (0x01, "Bolus")
    PRIME = (0x03, "Prime")
    ALARM = (0x06, "Alarm")
    DAILY_TOTAL = (0x07, "DailyTotal")
    BASAL_PROFILE_BEFORE = (0x08, "BasalProfileBefore")
    BASAL_PROFILE_AFTER = (0x09, "BasalProfileAfter")
    BG_CAPTURE = (0x0A, "BGCapture")
    SENSOR_ALARM = (0x0B, "SensorAlarm")
    CLEAR_ALARM = (0x0C, "ClearAlarm")
    CHANGE_BASAL_PATTERN = (0x14, "ChangeBasalPattern")
    TEMP_BASAL_DURATION = (0x16, "TempBasalDuration")
    CHANGE_TIME = (0x17, "ChangeTime")
    NEW_TIME = (0x18, "NewTime")
    LOW_BATTERY = (0x19, "LowBattery")
    BATTERY_CHANGE = (0x1A, "BatteryChange")
    SET_AUTO_OFF = (0x1B, "SetAutoOff")
    SUSPEND_PUMP = (0x1E, "SuspendPump")
    RESUME_PUMP = (0x1F, "ResumePump")
    SELF_TEST = (0x20, "SelfTest")
    REWIND = (0x21, "Rewind")
    CLEAR_SETTINGS = (0x22, "ClearSettings")
    ENABLE_CHILD_BLOCK = (0x23, "EnableChildBlock")
    CHANGE_MAX_BOLUS = (0x24, "ChangeMaxBolus")
    ENABLE_REMOTE = (0x26, "EnableRemote")
    CHANGE_MAX_BASAL = (0x2C, "ChangeMaxBasal")
    ENABLE_BOLUS_WIZARD = (0x2D, "EnableBolusWizard")
    TEMP_BASAL_RATE = (0x33, "TempBasalRate")
    LOW_RESERVOIR = (0x34, "LowReservoir")
    BOLUS_WIZARD_SETUP = (0x5A, "BolusWizardSetup")
    BOLUS_WIZARD = (0x5B, "BolusWizard")
    UNABSORBED_INSULIN = (0x5C, "UnabsorbedInsulin")
    CHANGE_TEMP_BASAL_TYPE = (0x62, "ChangeTempBasalType")
    CHANGE_TIME_DISPLAY = (0x64, "ChangeTimeDisplay")
    DAILY_TOTAL_522 = (0x6D, "DailyTotal522")
    DAILY_TOTAL_523 = (0x6E, "DailyTotal523")
    CHANGE_CARB_UNITS = (0x6F, "ChangeCarbUnits")
    BASAL_PROFILE_START = (0x7B, "BasalProfileStart")


_MIDNIGHT = time(0, 0)


@dataclass
class BasalRate:
    """Basal schedule entry."""

    start: time = _MIDNIGHT
    rate: Insulin = Insulin(0)


@dataclass
class CarbRatio:
    """Carb ratio schedule entry; ``ratio`` is scaled by ``units``."""

    start: time = _MIDNIGHT
    ratio: Ratio = Ratio(0)
    units: CarbUnitsType | None = None


@dataclass
class GlucoseTarget:
    start: time = _MIDNIGHT
    low: Glucose = Glucose(0)
    high: Glucose = Glucose(0)
    units: GlucoseUnitsType | None = None


@dataclass
class InsulinSensitivity:
    start: time = _MIDNIGHT
    sensitivity: Glucose = Glucose(0)
    units: GlucoseUnitsType | None = None


@dataclass
class BolusRecord:
    """Delivered bolus. ``duration`` is set only for square/dual-wave boluses."""

    programmed: Insulin = Insulin(0)
    amount: Insulin = Insulin(0)
    unabsorbed: Insulin = Insulin(0)
    duration: timedelta | None = None


@dataclass
class BolusWizardConfig:
    ratios: list[CarbRatio] = field(default_factory=list)
    sensitivities: list[InsulinSensitivity] = field(default_factory=list)
    targets: list[GlucoseTarget] = field(default_factory=list)
    insulin_action: timedelta = timedelta(0)


@dataclass
class BolusWizardRecord:
    """Bolus wizard estimate; ``carb_ratio`` is scaled by ``carb_units``."""

    glucose_input: Glucose = Glucose(0)
    carbs: int = 0
    carb_units: CarbUnitsType | None = None
    carb_ratio: Ratio = Ratio(0)
    sensitivity: Glucose = Glucose(0)
    target_low: Glucose = Glucose(0)
    target_high: Glucose = Glucose(0)
    glucose_units: GlucoseUnitsType | None = None
    correction: Insulin = Insulin(0)
    food: Insulin = Insulin(0)
    unabsorbed: Insulin = Insulin(0)
    bolus: Insulin = Insulin(0)


@dataclass
class UnabsorbedBolus:
    bolus: Insulin = Insulin(0)
    age: timedelta = timedelta(0)


@dataclass
class SettingsInfo:
    auto_off: timedelta = timedelta(0)
    insulin_action: timedelta = timedelta(0)
    max_bolus: Insulin = Insulin(0)
    max_basal: Insulin = Insulin(0)
    rf_enabled: bool = False
    selected_pattern: int = 0
    temp_basal_type: TempBasalType | None = None


@dataclass
class TempBasalInfo:
    """Active temporary basal; ``insulin`` or ``percent`` depending on type."""

    duration: timedelta = timedelta(0)
    temp_type: TempBasalType | None = field(
        default=None, metadata={"wire": "Type"}
    )
    insulin: Insulin | None = None
    percent: int | None = None


@dataclass
class BatteryInfo:
    voltage: Voltage = Voltage(0)
    low_battery: bool = False


@dataclass
class HistoryRecord:
    """One pump history event.

    The variant is the op-code in ``data[0]``; the payload fields below
    are set only for the kinds that carry them.
    """

    data: bytes = b""
    time: datetime | None = None
    duration: timedelta | None = None
    enabled: bool | None = None
    insulin: Insulin | None = None
    bolus: BolusRecord | None = None
    glucose: Glucose | None = None
    glucose_units: GlucoseUnitsType | None = None
    temp_basal_type: TempBasalType | None = None
    value: int | None = None
    bolus_wizard: BolusWizardRecord | None = None
    bolus_wizard_setup: BolusWizardConfig | None = None
    unabsorbed_insulin: list[UnabsorbedBolus] | None = None

    @property
    def kind(self) -> HistoryRecordType | None:
        """Variant of this record, or None if the op-code is not known."""
        if not self.data:
            return None
        try:
            return HistoryRecordType(self.data[0])
        except ValueError:
            return None

    def type_label(self) -> str:
        """Display name of the variant, as written in the ``Type`` field."""
        if not self.data:
            return "Unknown"
        kind = self.kind
        if kind is None:
            return f"HistoryRecordType({self.data[0]})"
        return kind.label
