from typing import Optional


class MakeshlibsException(Exception):
    """Base class for makeshlibs exceptions."""

    def __init__(self, *args, code: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(*args)
        self.code = code
        self.detail = detail

    def __str__(self):
        if self.detail:
            return f"{', '.join(self.args)}:\n{self.detail}"
        return super().__str__()


class CompatLevelError(MakeshlibsException):
    """The debhelper compatibility level is missing or unsupported."""


class ControlFileError(MakeshlibsException):
    """Failure reading debian/control or debian/changelog."""


class MetadataDumpFailure(MakeshlibsException):
    """The binary metadata dumper exited with an error."""


class GensymbolsFailure(MakeshlibsException):
    """dpkg-gensymbols failed for one or more packages."""
