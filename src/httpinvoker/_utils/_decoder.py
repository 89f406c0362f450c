from typing import Any, Optional

from ..models.descriptors import MethodDescriptor, ResultShape
from ..models.errors import UnsuccessfulStatusError
from ..models.request import HttpResponse
from ._codec import JsonCodec

OK_CODE_L = 200
OK_CODE_H = 300


class ResponseDecoder:
    def __init__(self, codec: JsonCodec):
        self._codec = codec

    def decode(
        self,
        url: str,
        response: Optional[HttpResponse],
        descriptor: MethodDescriptor,
    ) -> Any:
        """Convert a response into the declared result shape.

        Raises:
            UnsuccessfulStatusError: If the status code is not 2xx, whatever
                the declared shape.
        """
        if response is None:
            return None
        if response.status_code < OK_CODE_L or response.status_code >= OK_CODE_H:
            raise UnsuccessfulStatusError(
                url, response.status_code, response.status_message
            )

        shape = descriptor.result_shape
        if shape is ResultShape.NONE:
            return None
        if shape is ResultShape.TEXT:
            return response.body
        if shape is ResultShape.BYTES:
            return response.body_as_bytes
        if shape is ResultShape.STREAM:
            return response.body_stream
        if shape is ResultShape.RESPONSE:
            return response
        content = response.body_as_bytes
        if not content:
            return None
        return self._codec.decode(content, descriptor.result_type)
