class SfExportException(Exception):
    """ Base class for all sfexport Exceptions """

    pass


class SfExportUsageError(SfExportException):
    """ An exception thrown due to improper usage which should be resolvable by proper usage """

    pass


class SfExportFailure(SfExportException):
    """ An exception representing a failure of the backend such as a failed query or retrieve """

    pass


class ConfigError(SfExportUsageError):
    """ Raised when a configuration enounters an error """

    def __init__(self, message=None, config_name=None):
        super(ConfigError, self).__init__(message)
        self.message = message
        self.config_name = config_name

    def __str__(self):
        if self.config_name:
            return f"{self.message} for config {self.config_name}"
        return str(self.message)


class ConfigMergeError(ConfigError):
    """ Raised when merging configuration fails. """

    pass


class TaskOptionsError(SfExportUsageError):
    """ Raise when a task's options are invalid """

    pass


class SfdxCommandError(SfExportFailure):
    """ Raised when an sf CLI command exits with a non-zero return code """

    def __init__(self, message, returncode=None, stderr=None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedResponseError(SfExportFailure):
    """ Raised when the sf CLI returns output that can't be decoded """

    pass


class ManifestStateError(SfExportException):
    """ Raised when the manifest builder is driven out of order """

    pass
