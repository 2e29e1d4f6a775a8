"""Exception hierarchy for the radar server."""


class RadarError(Exception):
    """Base exception for all radar errors."""


class RadarConfigError(RadarError):
    """Invalid radar configuration."""


class DeliveryError(RadarError):
    """An update could not be written to a viewer's connection."""

    def __init__(self, message, *, entity_id=None):
        self.entity_id = entity_id
        super().__init__(message)
