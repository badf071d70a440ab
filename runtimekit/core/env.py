"""Environment variables recognized by RuntimeKit."""

# Explicit runtime version; wins over the manifest and the release catalog.
RUNTIME_VERSION = "RUNTIMEKIT_RUNTIME_VERSION"

# Forces detection to opt in for the named runtime (and out for all others).
RUNTIME = "RUNTIMEKIT_RUNTIME"

# "default" or "alternative"; selects catalog and archive mirrors.
NETWORK = "RUNTIMEKIT_NETWORK"

# Root directory holding layer directories and their metadata files.
LAYERS_DIR = "RUNTIMEKIT_LAYERS_DIR"
