"""Battery class for backup power cells."""
from typing import Optional, Union

from .status import BatteryStatus


class Battery:
    """A backup battery belonging to a technology."""

    def __init__(
            self,
            id: str,
            capacity_ah: float,
            voltage_v: float,
            install_date: str,
            next_replacement_date: str,
            status: Union[BatteryStatus, str] = BatteryStatus.HEALTHY,
            last_check_date: Optional[str] = None,
            serial_number: Optional[str] = None,
            manufacture_date: Optional[str] = None,
            notes: Optional[str] = None,
    ):
        self.id = str(id)
        self.capacity_ah = capacity_ah
        self.voltage_v = voltage_v
        self.install_date = install_date
        self.last_check_date = last_check_date
        self.next_replacement_date = next_replacement_date
        self.status = BatteryStatus(status)
        self.serial_number = serial_number
        self.manufacture_date = manufacture_date
        self.notes = notes

    @property
    def rating(self) -> str:
        """Capacity and voltage, e.g. '18Ah / 12V'."""
        return f"{_number(self.capacity_ah)}Ah / {_number(self.voltage_v)}V"


def _number(value) -> str:
    # 18.0 -> "18", 7.2 -> "7.2"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
