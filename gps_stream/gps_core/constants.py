"""GPS/NMEA protocol constants and configuration defaults."""

# Speed conversion factors
KMH_PER_KNOT = 1.852

# Two-digit years are always placed in this century (230394 -> 2094)
DATE_CENTURY_OFFSET = 2000

# Sentence framing
SENTENCE_START = "$"
CHECKSUM_DELIMITER = "*"
CHECKSUM_LENGTH = 2
NULL_BYTE = 0x00

# Sentinel for a record that has never been decoded
NEVER_UPDATED = 0.0

# GGA fix quality indicator
FIX_QUALITY_DESCRIPTIONS = {
    0: "Invalid",
    1: "GPS fix",
    2: "DGPS fix",
    3: "PPS fix",
    4: "RTK fixed",
    5: "RTK float",
    6: "Estimated",
    7: "Manual input",
    8: "Simulation",
}

# RMC/VTG mode indicator
MODE_DESCRIPTIONS = {
    "N": "Not valid",
    "A": "Autonomous",
    "D": "Differential",
    "E": "Estimated",
}

# Decoder defaults
DEFAULT_BUFFER_SIZE = 512
DEFAULT_IDLE_MS = 50
DEFAULT_PROCESS_INTERVAL = 0.02

# Default serial configuration
DEFAULT_SERIAL_PORT = "/dev/serial0"
DEFAULT_BAUD_RATE = 9600
DEFAULT_RECONNECT_DELAY = 3.0
DEFAULT_READ_SIZE = 64
