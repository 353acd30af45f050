"""
Domain errors raised by the services and translated to HTTP responses by the routers
"""


class StudyToolError(Exception):
    """Base class for every error the study tools raise on purpose"""


class MissingInputError(StudyToolError):
    """A required input (document text, uploaded file) was not supplied"""


class FileTooLargeError(StudyToolError):
    """The uploaded file exceeds the configured size limit"""


class UnsupportedFileTypeError(StudyToolError):
    """The uploaded file is not a PDF, DOCX or plain-text document"""


class ExtractionError(StudyToolError):
    """A recognised document could not be parsed"""


class GenerationError(StudyToolError):
    """The completion provider failed to produce a result"""

    def __init__(self, artifact: str, cause: Exception):
        super().__init__(f"Failed to generate {artifact}: {cause}")
        self.artifact = artifact
        self.cause = cause
