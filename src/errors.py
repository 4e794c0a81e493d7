# src/errors.py
# Exception types raised by the generator and the load pipeline.


class LoadGeneratorError(Exception):
    """Base class for load generator failures."""


class ConfigurationError(LoadGeneratorError, ValueError):
    """Invalid run parameters, detected before any event is generated."""


class TransportError(LoadGeneratorError):
    """The sink rejected a batch or failed to acknowledge it.

    ``transferred`` is the count already durable in the sink, so a later run
    can resume from that offset.
    """

    def __init__(self, message: str, transferred: int = 0, total: int | None = None):
        super().__init__(message)
        self.transferred = transferred
        self.total = total
