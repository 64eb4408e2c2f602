"""Exception hierarchy for the metrics bridge"""


class BridgeError(Exception):
    """Base class for all metrics bridge errors"""


class HostnameResolutionError(BridgeError):
    """Raised when the local hostname cannot be determined at construction"""


class SnapshotEncodingError(BridgeError, ValueError):
    """Raised when a snapshot holds a value that has no JSON representation"""


class RegistryError(BridgeError):
    """Base class for registry errors"""


class DuplicateMetricError(RegistryError):
    """Raised when registering a name that is already taken"""

    def __init__(self, name: str):
        super().__init__(f"Metric already registered: {name}")
        self.name = name


class MetricKindMismatchError(RegistryError, TypeError):
    """Raised when get-or-register finds a metric of another kind under the name"""

    def __init__(self, name: str, expected, actual):
        super().__init__(
            f"Metric '{name}' is registered as {actual.value}, not {expected.value}"
        )
        self.name = name
        self.expected = expected
        self.actual = actual
