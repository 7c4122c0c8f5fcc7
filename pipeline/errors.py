"""Errors raised inside the label pipeline."""


class LabelError(Exception):
    """Base class for conditions reported to the user through ``status``."""


class NoDataError(LabelError):
    def __init__(self, message: str = "No data. Please add some rows"):
        super().__init__(message)


class NoColumnsSelectedError(LabelError):
    def __init__(self, message: str = ("Please select columns to display. Open the label "
                                       "settings and choose which columns to include.")):
        super().__init__(message)


class EditSessionError(LabelError):
    """An editor action that is not valid in the current editor state."""
