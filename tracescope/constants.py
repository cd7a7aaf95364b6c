"""Named constants shared across the package."""

from __future__ import annotations

# Opcode name bound to a context when the trace has no step to offer
SENTINEL_OPCODE = "INVALID"

# Byte reported for a pc the runtime table does not cover
MISSING_OPCODE_BYTE = 0xFF

# Step index carried by one-shot (deploy-time) contexts
NO_STEP_INDEX = -1

# Largest integer a JSON consumer can hold without precision loss
MAX_SAFE_INTEGER = 2**53 - 1

HEX_PREFIX = "0x"

HEATMAP_PLUGIN_ID = "core.heatmap"
JUMPS_PLUGIN_ID = "core.jumps"
HOTTEST_PC_PLUGIN_ID = "user.hottest_pc"
