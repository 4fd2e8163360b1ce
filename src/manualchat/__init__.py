"""manualchat: conversation store for the vehicle-manual assistant."""

__version__ = "0.1.0"
