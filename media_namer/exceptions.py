class RenamerError(Exception):
    """Base class for application-specific errors."""
    pass

class ConfigError(RenamerError):
    """Errors related to configuration loading or validation."""
    pass

class InvalidMediaTypeError(RenamerError):
    """Raised when a resolver that searches a source receives MediaFileType.UNKNOWN."""
    pass

class CollaboratorError(RenamerError):
    """I/O, network or persistence failure reported by an external collaborator."""
    pass

class MetadataError(CollaboratorError):
    """Errors related to fetching or processing external metadata."""
    pass

class FileOperationError(CollaboratorError):
    """Errors while listing the media library on disk."""
    pass
