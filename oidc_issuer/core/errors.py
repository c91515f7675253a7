"""Exception hierarchy for the issuer core."""


class IssuerError(Exception):
    """Base class for all issuer failures."""


class GenerationError(IssuerError):
    """Key or token generation, or its persistence, failed."""


class SigningError(GenerationError):
    """The signing key material could not be used."""
