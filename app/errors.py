"""
Error taxonomy for the generation core
"""


class StudyBuddyError(Exception):
    """Base class for errors raised by the study assistant core"""


class InvalidArgument(StudyBuddyError, ValueError):
    """Caller-supplied precondition violated; surfaced to the caller"""


class ModelUnavailable(StudyBuddyError, RuntimeError):
    """Text model unconfigured, failed or timed out; recovered via fallback"""


class ParseFailure(StudyBuddyError, ValueError):
    """Model answered but the output did not have the expected shape"""
