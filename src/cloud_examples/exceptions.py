"""
Exceptions raised by the committer checks and dependency probes.
"""


class CloudExamplesError(Exception):
    """Basic cloud examples exception"""


class CommitterVerificationError(AssertionError):
    """A committed output did not match expectations.

    Subclasses AssertionError so test runners report it as a failed assertion.
    """


class SuccessDataValidationError(CommitterVerificationError):
    """The success marker could not be parsed or has an unknown format"""


class SuccessFileNotFoundError(FileNotFoundError):
    """The success marker never became visible under the destination"""


class DependencyProbeError(CloudExamplesError):
    """A storage client class could not be loaded or instantiated"""


class UnsupportedSchemeError(CloudExamplesError, ValueError):
    """No filesystem client is registered for a URI scheme"""
