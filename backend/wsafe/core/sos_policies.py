"""SOS episode policy constants."""

from __future__ import annotations

# Minimum contacts required before an episode may start
MIN_CONTACTS_FOR_SOS = 1

# Bounded wait for a location fix, in seconds
LOCATION_TIMEOUT_SECONDS = 20.0

# A reported fix younger than this is served without waiting for a new one
LOCATION_MAX_AGE_SECONDS = 1.0

# Live-tracking cadence in seconds
LIVE_UPDATE_INTERVAL_SECONDS = 10.0

# Call escalation: calls per target and delay before the re-check
MAX_CALL_ATTEMPTS = 3
CALL_RETRY_SECONDS = 30.0

# Shake detection
SHAKE_THRESHOLD = 20.0  # m/s^2, magnitude of the acceleration vector
SHAKE_WINDOW_SECONDS = 3.0
SHAKE_TRIGGER_COUNT = 5

# Voice detection
VOICE_KEYWORDS = ("help", "emergency", "sos")

# Wearable token
WEARABLE_SOS_TOKEN = "SOS"

# Vibration on activation, milliseconds (wait, on, off, on)
ACTIVATION_VIBRATION_PATTERN = (0, 500, 200, 500)

# Trigger source labels
SOURCE_MANUAL = "panic button"
SOURCE_SHAKE = "shake"
SOURCE_VOICE = "voice"
SOURCE_WEARABLE = "wearable SOS"
SOURCE_WEARABLE_DISCONNECT = "bluetooth disconnect"

# Emergency helplines
HELPLINES = (
    ("Women Helpline", "1091"),
    ("National Emergency", "112"),
    ("Police", "100"),
    ("Ambulance", "102"),
    ("Child Helpline", "1098"),
)
