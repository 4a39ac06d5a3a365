"""Error taxonomy for yield sources.

Every error raised while talking to an upstream source derives from
YieldSourceError. Source boundaries convert these into "no data for this
source"; none of them reach the caller of the aggregator.
"""


class YieldSourceError(Exception):
    """Base class for failures while fetching or decoding a yield source."""


class NetworkError(YieldSourceError):
    """Upstream unreachable, timed out, or answered with a non-2xx status."""


class ParseError(YieldSourceError):
    """Upstream payload is not valid JSON (or otherwise undecodable)."""


class ExtractionError(YieldSourceError):
    """Expected structure is absent from an otherwise valid payload."""


class ValidationError(YieldSourceError):
    """Value lies outside its plausible range and is treated as absent."""
