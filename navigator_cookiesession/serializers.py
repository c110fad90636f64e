"""Session payload serialization.

Session records are encoded with jsonpickle so data models stored in a
session come back as instances of their own class.
"""
from typing import Any
import jsonpickle
from jsonpickle.unpickler import loadclass
from datamodel import BaseModel
from pydantic import BaseModel as PydanticBaseModel


class ModelHandler(jsonpickle.handlers.BaseHandler):
    """Flatten a model to its instance ``__dict__``.

    Restoring skips ``__init__`` and validation: the stored state was
    valid when it was saved.
    """
    def flatten(self, obj, data):
        data['__dict__'] = self.context.flatten(obj.__dict__, reset=False)
        return data

    def restore(self, obj):
        model = loadclass(obj['py/object'])
        instance = model.__new__(model)
        instance.__dict__ = self.context.restore(obj['__dict__'], reset=False)
        return instance


for _base in (BaseModel, PydanticBaseModel):
    jsonpickle.handlers.registry.register(_base, ModelHandler, base=True)


def encode(obj: Any) -> str:
    """encode

        Encode a session record using jsonpickle.
    Args:
        obj (Any): session record.

    Raises:
        RuntimeError: Error converting data to json.

    Returns:
        str: json version of the record.
    """
    try:
        return jsonpickle.encode(obj)
    except Exception as err:
        raise RuntimeError(err) from err


def decode(value: Any) -> Any:
    """decode.

        Decoding a session record saved with ``encode``.
    Args:
        value (str|bytes): the json payload.

    Raises:
        RuntimeError: Error converting data from json.

    Returns:
        Any: object converted.
    """
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    try:
        return jsonpickle.decode(value)
    except Exception as err:
        raise RuntimeError(err) from err
