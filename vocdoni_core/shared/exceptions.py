"""
Exception hierarchy for the Vocdoni core.

Exception Categories:
- RetryableException: Failures that may succeed against another gateway
- NonRetryableException: Local, deterministic failures (bad input, bad keys)
- ConfigurationException: Startup/config errors that prevent operation

Everything the core computes is local, so almost every error is
non-retryable. Only a gateway reporting an error in its response is worth
retrying, and that decision belongs to the caller.
"""


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for failures reported by a remote peer, like:
    - A gateway answering with an error body
    - A gateway rejecting a transaction it could not relay
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Malformed parameters
    - Census proofs that do not match the census origin
    - Ciphertexts that cannot be opened
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Raised when an environment override (e.g. VOCDONI_BLOCK_TIME) holds a
    value that cannot be used.
    """

    pass


class MalformedInputException(NonRetryableException):
    """
    A parameter has the wrong shape, length or encoding.

    Always raised before any cryptographic work starts.
    """

    pass


class MalformedKeyException(MalformedInputException):
    """A public or private key is not valid hex or has the wrong length."""

    pass


class UnsupportedCensusOriginException(NonRetryableException):
    """The census origin has no matching proof variant."""

    pass


class InvalidProofException(NonRetryableException):
    """
    The supplied census proof does not match the declared census origin.

    E.g. an EVM storage proof given for a CA census.
    """

    pass


class SignerUnavailableException(NonRetryableException):
    """A signature is required but no signing capability was supplied."""

    pass


class DecryptionFailedException(NonRetryableException):
    """A sealed box could not be opened with the supplied private key."""

    pass


class InvalidSignatureException(NonRetryableException):
    """A signed message does not match the expected signer."""

    pass


class GatewayErrorException(RetryableException):
    """
    A gateway answered with an error body.

    Inherits from RetryableException because another gateway may accept
    the same request.
    """

    pass
