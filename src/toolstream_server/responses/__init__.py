"""HTTP response translation for request outcomes."""

from toolstream_server.responses.translator import ResponseTranslator

__all__ = ["ResponseTranslator"]
