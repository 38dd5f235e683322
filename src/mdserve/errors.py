"""Exceptions raised while resolving and rendering requests."""


class MdserveError(Exception):
    """Base class for mdserve errors."""


class PathTraversalError(MdserveError):
    """Requested path resolves outside the served root."""


class RenderError(MdserveError):
    """Failure while producing a rendered page.

    The message carries diagnostic detail for the log. Responses only ever
    contain ``public_message``.
    """

    public_message = "Error rendering page"


class ReadError(RenderError):
    public_message = "Unable to read file"


class ConversionError(RenderError):
    public_message = "Error rendering markdown"


class TemplateError(RenderError):
    public_message = "Error rendering page"
