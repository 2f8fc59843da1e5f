"""Domain exceptions.  The API layer maps each one to an HTTP status."""


class ConfigurationNotFound(Exception):
    """No city, transport mode or active pricing profile for a lookup."""


class InvalidPricingConfig(ValueError):
    """A stored rules_config could not be loaded into a PricingRuleConfig."""


class InvalidCoordinates(ValueError):
    """Latitude or longitude outside the valid degree range."""
