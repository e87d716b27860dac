"""
Nautilus configuration store (backs the env/get/set built-ins).

Layers, highest priority first
1. values stored with set()
2. environment variables <PREFIX>_<KEY> (only when a prefix is configured;
   dots in keys become underscores: "log.level" -> "APP_LOG_LEVEL")
3. values loaded from YAML files with load()
4. defaults given at construction

Keys are case-insensitive and nested mappings are flattened to dotted keys
({"log": {"level": "info"}} -> "log.level").
"""
import os
from collections.abc import Mapping

import yaml

from .utils import *


def flatten(mapping, /, parent=""):
    """
    Flatten nested mappings into {"dotted.lowercase.key": value}.
    """
    if not isinstance(mapping, Mapping):
        raise TypeError("flatten() argument must be a mapping")
    flat = {}
    for key, value in mapping.items():
        name = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, name))
        else:
            flat[name.strip().lower()] = value
    return flat


def _nest(flat, /):
    nested = {}
    for key, value in flat.items():
        *parents, leaf = key.split(".")
        node = nested
        for parent in parents:
            node = node.setdefault(parent, {})
        node[leaf] = value
    return nested


class Configuration(metaclass=ReflectiveType):
    """
    String-keyed, dynamically typed store with layered precedence.

    Properties (read-only)
    - prefix: environment variable prefix ("" disables the environment layer)
    """
    __introspectable__ = (
        "prefix",
    )

    def __init__(self, defaults=Unset, /, *, prefix=Unset, environ=Unset):
        """
        Parameters
        - defaults: Mapping of default values (nested mappings are flattened).
        - prefix: environment variable prefix, e.g. "MERCATOR".
        - environ: Mapping consulted for the environment layer (os.environ by default).
        """
        if not isinstance(prefix, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'prefix' must be a string")
        if not isinstance(environ, Mapping | Unset):
            raise TypeError(f"{type(self).__typename__} 'environ' must be a mapping")
        self._defaults = flatten(coalesce(defaults, {}))
        self._loaded = {}
        self._overrides = {}
        self._prefix = coalesce(prefix, "").strip().upper().rstrip("_")
        self._environ = coalesce(environ, os.environ)

    @staticmethod
    def _normalize(key, /):
        if not isinstance(key, str):
            raise TypeError("configuration keys must be strings")
        return key.strip().lower()

    def _variable(self, key, /):
        return f"{self._prefix}_{key.replace('.', '_').replace('-', '_').upper()}"

    def __contains__(self, key):
        return self._normalize(key) in self.all_keys()

    def get(self, key, default=None, /):
        """
        Value of `key` from the highest layer holding it, or `default`.
        """
        key = self._normalize(key)
        if key in self._overrides:
            return self._overrides[key]
        if self._prefix and (variable := self._variable(key)) in self._environ:
            return self._environ[variable]
        if key in self._loaded:
            return self._loaded[key]
        return self._defaults.get(key, default)

    def set(self, key, value, /):
        """
        Store `value` under `key`, above every other layer.
        """
        self._overrides[self._normalize(key)] = value

    def defaults(self, mapping, /):
        """
        Merge more defaults into the lowest layer.
        """
        self._defaults.update(flatten(mapping))

    def all_keys(self):
        """
        Every key known to any layer, sorted.

        Environment variables only shadow known keys; they never add new ones.
        """
        return sorted({*self._defaults, *self._loaded, *self._overrides})

    def load(self, path, /):
        """
        Merge a YAML document (a mapping at the top level) into the file layer.

        Raises
        - OSError when the file cannot be read.
        - ValueError when the document is not a mapping or not valid YAML.
        """
        with open(path, encoding="utf-8") as stream:
            try:
                document = yaml.safe_load(stream)
            except yaml.YAMLError as exception:
                raise ValueError(f"cannot parse {os.fspath(path)!r}: {exception}") from exception
        if document is None:
            return
        if not isinstance(document, Mapping):
            raise ValueError(f"{os.fspath(path)!r} must contain a mapping at the top level")
        self._loaded.update(flatten(document))

    def save(self, path, /):
        """
        Write every effective value as a nested YAML document.
        """
        with open(path, "w", encoding="utf-8") as stream:
            yaml.safe_dump(_nest({key: self.get(key) for key in self.all_keys()}), stream, default_flow_style=False)

    def snapshot(self):
        """
        Effective values of every key as a flat dict.
        """
        return {key: self.get(key) for key in self.all_keys()}


__all__ = (
    "flatten",
    "Configuration",
)
