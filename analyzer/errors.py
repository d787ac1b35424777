"""Named failures raised by the analysis pipeline."""


class ExportMapError(Exception):
    """Base class for all analysis failures."""


class InputNotFoundError(ExportMapError):
    """The analyzed file does not exist."""


class UnsupportedFileError(ExportMapError):
    """The analyzed file does not have a supported extension."""


class ProjectRootNotFoundError(InputNotFoundError):
    """No ancestor directory of the analyzed file holds a project marker."""


class NoExportsError(ExportMapError):
    """The analyzed file exports nothing, so there is nothing to correlate."""


class SearchError(ExportMapError):
    """A single search-engine invocation failed."""


class SearchUnavailableError(SearchError):
    """The search engine cannot be invoked at all."""
