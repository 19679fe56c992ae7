""" Error taxonomy for the document/tree engine. """


class CodeArchError(Exception):
    """ Base for every error raised by the engine. """


class SchemaError(CodeArchError):
    """ A schema (or a `$ref` target) could not be read or parsed. """


class DocumentError(CodeArchError):
    """ A document could not be read, parsed, navigated or written. """


class UnsupportedFormatError(CodeArchError):
    """ Unknown `format` or `type` met during decode or synthesis. """


class ValidationError(CodeArchError):
    """ Operation preconditions violated; raised before any mutation. """
