from ._serialization_fields import dump_fields, load_fields

__all__ = [
    dump_fields.__name__,
    load_fields.__name__,
]
