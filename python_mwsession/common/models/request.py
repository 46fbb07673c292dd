from typing import Any, Dict, Optional, Union
from uuid import UUID
from uuid6 import uuid7
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum
from .headers import Headers

class RequestMethod(str, Enum):
    GET = "GET"
    POST = "POST"

class ApiRequest(BaseModel):
    """Call descriptor handed to the pipeline by endpoint wrappers.

    ``params`` always hold API parameters. On a form POST they are encoded into
    the body together with ``data``; when ``content`` carries an already-encoded
    body (multipart upload, raw bytes) it is sent as-is and ``params`` stay in
    the query string.
    """
    id: UUID = Field(default_factory=uuid7)
    url: str
    method: RequestMethod = RequestMethod.GET
    headers: Headers = Field(default_factory=Headers)
    params: Dict[str, Any] = Field(default_factory=dict)
    data: Optional[Dict[str, Any]] = None
    content: Optional[Union[bytes, str]] = None

    def with_headers(self, headers: Dict[str, str]) -> "ApiRequest":
        for key, value in headers.items():
            self.headers.add(key, value)
        return self

    def with_form(self, data: Dict[str, Any]) -> "ApiRequest":
        self.method = RequestMethod.POST
        self.data = data
        return self

    def with_body(self, content: Union[bytes, str], content_type: Optional[str] = None) -> "ApiRequest":
        self.method = RequestMethod.POST
        self.content = content
        if content_type:
            self.headers.add("Content-Type", content_type)
        return self

    @property
    def is_form(self) -> bool:
        return self.method == RequestMethod.POST and self.content is None

    model_config = ConfigDict(arbitrary_types_allowed=True)
