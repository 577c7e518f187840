import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import jsonschema
import yaml

from .constants import YAML_SUFFIXES

logger = logging.getLogger(__name__)

PathLike = Union[Path, str]


class BaseConfiguration:
    """Base class for the documents exchanged on the wire.

    Subclasses describe their JSON representation with a schema and know how
    to build themselves from (and dump themselves to) a dictionary.
    """

    # Setting this is deferred to the inherited classes
    _SCHEMA: Optional[Dict[Any, Any]] = None
    _VALIDATOR_FUNC: Optional[Callable] = None

    @classmethod
    def from_dictionary(cls, dictionary: Mapping, validate: bool = True):
        """Alternative constructor. Build the object from a dictionary."""
        raise NotImplementedError

    @classmethod
    def from_json(cls, data: Union[str, bytes], validate: bool = True):
        return cls.from_dictionary(json.loads(data), validate=validate)

    @classmethod
    def from_file(cls, path: PathLike, validate: bool = True):
        """Alternative constructor. Build the object from a JSON or YAML file.

        The format is guessed from the file suffix, JSON being the default.
        """
        path = Path(path)
        content = path.read_text()
        if path.suffix in YAML_SUFFIXES:
            dictionary = yaml.safe_load(content)
        else:
            dictionary = json.loads(content)
        logger.debug("Loaded %s from %s", cls.__name__, path)
        return cls.from_dictionary(dictionary, validate=validate)

    @classmethod
    def validate(cls, dictionary: Mapping, schema: Optional[Dict] = None):
        if schema is None:
            schema = cls._SCHEMA
        if cls._VALIDATOR_FUNC is None:
            jsonschema.validate(dictionary, schema)
        else:
            # pylint: disable-next=not-callable
            cls._VALIDATOR_FUNC(schema).validate(dictionary)

    def to_dict(self) -> Dict:
        return {}

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def finalize(self):
        """Check that the wire representation of this object is well formed."""
        d = self.to_dict()
        logger.debug(json.dumps(d, indent=4))
        self.validate(d)
        return self

    def set(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        return self
