class HotspotLoginError(Exception):
    """Base class for errors raised by hotspot_login."""


class ConfigError(HotspotLoginError):
    """The account file is unreadable or incomplete."""


class ConfigMissingError(ConfigError):
    """The account file did not exist; a template was written in its place."""
