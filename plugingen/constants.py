"""Global constants for the plugin code generator."""

import os

# Suffix appended to a source module's stem to name its generated module
GENERATED_SUFFIX = os.getenv("PLUGINGEN_SUFFIX", "_gen")

# Module the generated code imports Plugin, PluginSubscriptions, PluginInfo and EventType from
RUNTIME_MODULE = os.getenv("PLUGINGEN_RUNTIME_MODULE", "plugingen.interfaces")

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

# Decorator names recognised on declarations (matched on the final dotted name)
DESCRIPTOR_MARKER = "plugin"
SUBSCRIPTIONS_MARKER = "subscriptions"
HANDLER_MARKER = "handler"
MARKERS = (DESCRIPTOR_MARKER, SUBSCRIPTIONS_MARKER, HANDLER_MARKER)

# Descriptor annotation keys, in the order missing fields are reported
DESCRIPTOR_KEYS = ("id", "name", "version", "api")

# Base classes that make a class an enum rather than a structure
ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})

# Directories never scanned for annotated sources
SKIP_DIRS = frozenset({"__pycache__", ".git", ".venv", "venv", "build", "dist"})

# Aliases the generated module imports the runtime and source modules under
RUNTIME_ALIAS = "_runtime"
SOURCE_ALIAS = "_source"
