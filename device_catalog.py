"""
In-memory device catalog for Responsive Tester
Reference viewport profiles, seeded once at startup and read-mostly afterwards
"""

import logging
from typing import Dict, List, Optional

from models import Device

logger = logging.getLogger(__name__)


DEFAULT_DEVICES: List[dict] = [
    {
        "id": "iphone-14-pro",
        "name": "iPhone 14 Pro",
        "type": "phone",
        "manufacturer": "Apple",
        "screenSizes": [
            {"width": 1179, "height": 2556},
            {"width": 390, "height": 844},
        ],
        "osVersions": ["iOS 16", "iOS 17"],
    },
    {
        "id": "samsung-s23-ultra",
        "name": "Samsung Galaxy S23 Ultra",
        "type": "phone",
        "manufacturer": "Samsung",
        "screenSizes": [
            {"width": 1440, "height": 3088},
            {"width": 360, "height": 780},
        ],
        "osVersions": ["Android 13", "Android 14"],
    },
    {
        "id": "ipad-pro",
        "name": 'iPad Pro 12.9"',
        "type": "tablet",
        "manufacturer": "Apple",
        "screenSizes": [
            {"width": 2048, "height": 2732},
            {"width": 1024, "height": 1366},
        ],
        "osVersions": ["iPadOS 16", "iPadOS 17"],
    },
    {
        "id": "macbook-air-13",
        "name": 'MacBook Air 13"',
        "type": "laptop",
        "manufacturer": "Apple",
        "screenSizes": [
            {"width": 2560, "height": 1664},
            {"width": 1280, "height": 832},
        ],
        "osVersions": ["macOS 13", "macOS 14"],
    },
]


class DeviceExistsError(ValueError):
    """Raised when inserting a device whose id is already catalogued."""


class DeviceCatalog:
    """
    Device profiles keyed by id, in insertion order.
    Supports lookup and insertion; entries are never removed or edited.
    """

    def __init__(self, seed: Optional[List[dict]] = None):
        self._devices: Dict[str, Device] = {}
        for entry in DEFAULT_DEVICES if seed is None else seed:
            device = Device.model_validate(entry)
            self._devices[device.id] = device
        logger.info(f"📱 Device catalog seeded with {len(self._devices)} devices")

    def list_devices(self) -> List[Device]:
        return list(self._devices.values())

    def get_device(self, device_id: str) -> Optional[Device]:
        return self._devices.get(device_id)

    def add_device(self, device: Device) -> Device:
        if device.id in self._devices:
            raise DeviceExistsError(f"Device already exists: {device.id}")
        self._devices[device.id] = device
        logger.info(f"✅ Device added: {device.id}")
        return device

    def __len__(self) -> int:
        return len(self._devices)

    def close(self):
        """Drop all entries at shutdown"""
        self._devices.clear()
