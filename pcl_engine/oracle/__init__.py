"""TWAP observation buffer."""

from .observation import Observation, ObservationBuffer, OracleObservation, PrecommitObservation

__all__ = ["Observation", "ObservationBuffer", "OracleObservation", "PrecommitObservation"]
