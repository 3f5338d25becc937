class ArchiveError(Exception):
    """Base class for every failure the archive pipeline reports to callers."""


class InputError(ArchiveError):
    pass


class NavigationError(ArchiveError):
    """The page could not be loaded: DNS, TLS, timeout or a non-2xx status."""


class SizeLimitError(ArchiveError):
    pass


class SaveError(ArchiveError):
    """Writing an artifact failed. Files written before the failure stay on disk."""


class GateTimeoutError(ArchiveError):
    pass


class BrowserInitError(ArchiveError):
    pass
