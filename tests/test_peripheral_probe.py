"""
Tests for the USB peripheral probe and its block parser.
"""
import pytest

from packages.core.monitor import peripheral_probe
from packages.core.monitor.errors import ProbeUnavailable
from packages.core.monitor.peripheral_probe import (
    UsbPeripheralProbe,
    count_external_devices,
    device_entries,
)

KEYBOARD_AND_DRIVE = """USB:

    Apple Internal Keyboard / Trackpad:

      Product ID: 0x027e
      Vendor ID: 0x05ac (Apple Inc.)
      Location ID: 0x03100000

    SanDisk USB Drive:

      Product ID: 0x5581
      Vendor ID: 0x0781  (SanDisk Corporation)
      Serial Number: 4C530001
"""

BUSES_ONLY = """USB:

    USB 3.1 Bus:

      Host Controller Driver: AppleT8103USBXHCI
      Host Controller Location: Built-in USB

    USB 3.0 Bus:

      Host Controller Driver: AppleUSBXHCIPPT
"""

EXTERNAL_LAST = """USB:

    USB 3.0 Bus:

      Host Controller Driver: AppleUSBXHCIPPT

    Logitech USB Receiver:

      Product ID: 0xc52b

    YubiKey OTP+FIDO+CCID:

      Product ID: 0x0407
      Vendor ID: 0x1050"""


class TestDeviceParsing:
    """Block parsing of the system_profiler device tree"""

    def test_internal_keyboard_and_external_drive(self):
        """Only the SanDisk drive counts"""
        assert count_external_devices(KEYBOARD_AND_DRIVE) == 1

    def test_entries_start_only_at_four_spaces(self):
        names = device_entries(KEYBOARD_AND_DRIVE)

        assert names == ["apple internal keyboard / trackpad:", "sandisk usb drive:"]

    def test_attribute_lines_are_not_entries(self):
        names = device_entries(KEYBOARD_AND_DRIVE)

        assert not any("product id" in n for n in names)

    def test_buses_are_internal(self):
        assert count_external_devices(BUSES_ONLY) == 0

    def test_last_entry_is_counted(self):
        """Nothing follows the last device, it must still be counted"""
        assert count_external_devices(EXTERNAL_LAST) == 2

    @pytest.mark.parametrize("output", ["", "   \n", "No USB devices found.\n"])
    def test_empty_output_yields_zero(self, output):
        assert count_external_devices(output) == 0

    def test_custom_patterns(self):
        assert count_external_devices(KEYBOARD_AND_DRIVE, patterns=["sandisk"]) == 1
        assert count_external_devices(KEYBOARD_AND_DRIVE, patterns=["sandisk", "keyboard"]) == 0


class TestUsbPeripheralProbe:
    """Probe wrapper around system_profiler"""

    @pytest.mark.asyncio
    async def test_reports_external_count(self, monkeypatch):
        async def fake_run(args, timeout=10.0, allow_nonzero=False):
            assert args == ["system_profiler", "SPUSBDataType"]
            return KEYBOARD_AND_DRIVE

        monkeypatch.setattr(peripheral_probe, "run_command", fake_run)

        result = await UsbPeripheralProbe().check()

        assert result.count == 1
        assert "sandisk" in result.evidence

    @pytest.mark.asyncio
    async def test_command_failure_reports_zero(self, monkeypatch):
        async def failing_run(args, timeout=10.0, allow_nonzero=False):
            raise ProbeUnavailable("system_profiler", "executable not found")

        monkeypatch.setattr(peripheral_probe, "run_command", failing_run)

        result = await UsbPeripheralProbe().check()

        assert result.count == 0
