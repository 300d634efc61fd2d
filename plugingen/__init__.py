"""Build-time generator for plugin descriptor and subscription implementations.

Imports are lazy so that ``plugingen.cli`` can load ``.env`` before
``plugingen.constants`` reads the environment.
"""

__all__ = [
    "Plugin",
    "PluginSubscriptions",
    "PluginInfo",
    "EventType",
    "plugin",
    "subscriptions",
    "handler",
    "Generator",
    "ModuleReport",
    "PluginDescriptor",
    "Diagnostic",
    "ErrorKind",
    "GenerationError",
]


def __getattr__(name):
    if name in ("Plugin", "PluginSubscriptions", "PluginInfo", "EventType"):
        from plugingen import interfaces
        return getattr(interfaces, name)
    if name in ("plugin", "subscriptions", "handler"):
        from plugingen import markers
        return getattr(markers, name)
    if name in ("Generator", "ModuleReport"):
        from plugingen import generator
        return getattr(generator, name)
    if name == "PluginDescriptor":
        from plugingen.descriptor import PluginDescriptor
        return PluginDescriptor
    if name in ("Diagnostic", "ErrorKind", "GenerationError"):
        from plugingen import diagnostics
        return getattr(diagnostics, name)
    raise AttributeError(f"module 'plugingen' has no attribute {name!r}")
