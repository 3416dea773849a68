class MandelviewError(Exception):
    """Base class for errors raised by mandelview."""

class ViewportError(MandelviewError, ValueError):
    pass

class PaletteError(MandelviewError, ValueError):
    pass

class EventError(MandelviewError, ValueError):
    pass
