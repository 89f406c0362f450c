"""Binding of call arguments onto an HttpRequest.

Precedence, kept exactly as established by existing clients:

1. A non-empty map built from PLAIN/BODY bound arguments is the only source
   of ``data``.
2. Otherwise, when no body was set, the first argument is used: a collection
   becomes the body verbatim, a file is ignored and anything else is
   flattened into ``data``.
3. Otherwise the body set during binding is flattened into ``data`` (and
   cleared) unless it is a file.
"""

import collections.abc
import io
import os
import typing
from typing import Any, Dict, Mapping, Optional, Sequence

from ..models.descriptors import BindingKind, MethodDescriptor
from ..models.errors import BindingTypeViolationError
from ..models.request import HttpRequest
from ._codec import JsonCodec

COLLECTION_TYPES = (list, tuple, set, frozenset)
TEXT_MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def is_file(arg: Any) -> bool:
    """Whether the argument is a byte input stream or a filesystem path handle."""
    return isinstance(arg, (io.IOBase, os.PathLike))


def is_collection(arg: Any) -> bool:
    return isinstance(arg, COLLECTION_TYPES)


def must_be_text_mapping(arg: Any) -> Dict[str, str]:
    if not isinstance(arg, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in arg.items()
    ):
        raise BindingTypeViolationError()
    return dict(arg)


def check_text_mapping_annotation(annotation: Any) -> None:
    """Reject HEADER_MAP/COOKIE_MAP parameters not declared as Mapping[str, str]."""
    origin = typing.get_origin(annotation)
    if origin not in TEXT_MAPPING_ORIGINS or typing.get_args(annotation) != (str, str):
        raise BindingTypeViolationError()


class ParameterBinder:
    def __init__(self, codec: JsonCodec):
        self._codec = codec

    def bind(
        self,
        args: Sequence[Any],
        descriptor: MethodDescriptor,
        request: HttpRequest,
    ) -> Optional[Dict[str, Any]]:
        """Apply the arguments to the request and return the parameter map.

        Headers, cookies, file bodies and collection bodies are written to the
        request directly. The returned map is what becomes ``request.data``.
        """
        bound = self._bind_declared(args, descriptor, request)
        if bound:
            return bound
        if request.body is None:
            first = args[0] if args else None
            if first is None or is_file(first):
                return None
            if is_collection(first):
                request.body = first
                return None
            return self._codec.to_map(first)
        if is_file(request.body):
            return None
        params = self._codec.to_map(request.body)
        if params is not None:
            request.body = None
        return params

    def _bind_declared(
        self,
        args: Sequence[Any],
        descriptor: MethodDescriptor,
        request: HttpRequest,
    ) -> Optional[Dict[str, Any]]:
        params: Optional[Dict[str, Any]] = None
        for index, arg in enumerate(args):
            if arg is None:
                continue
            binding = descriptor.binding_for(index)
            if binding.kind in (BindingKind.PLAIN, BindingKind.BODY):
                if params is None:
                    params = {}
                if is_file(arg):
                    request.body = arg
                    request.file_form_key = binding.key
                elif binding.kind is BindingKind.BODY:
                    flattened = self._codec.to_map(arg)
                    if flattened is None:
                        params[binding.key] = arg
                    else:
                        params.update(flattened)
                elif binding.key:
                    params[binding.key] = arg
            elif binding.kind is BindingKind.HEADER_MAP:
                request.headers = must_be_text_mapping(arg)
            elif binding.kind is BindingKind.COOKIE_MAP:
                request.cookies = must_be_text_mapping(arg)
        return params
