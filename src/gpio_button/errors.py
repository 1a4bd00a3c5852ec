"""
Error kinds raised or reported by the button library
"""


class ButtonError(Exception):
    """Base class for every error the library reports"""


class ConfigurationError(ButtonError, ValueError):
    """Invalid line offset, edge selector, polarity/bias value or missing callback"""


class ResourceError(ButtonError, RuntimeError):
    """The line could not be opened, configured, read or waited on"""


class StateUnknownError(ButtonError, LookupError):
    """Cached state requested before any successful sample or accepted edge"""


class ActionError(ButtonError, RuntimeError):
    """A shutdown or reboot command failed to run"""
