"""
Local representations of assistant output.

Raw content item payloads (as returned by the thread messages API) are first
parsed into a TextItem or ImageItem, then normalized into a TextResponse or
ImageResponse that downstream renderers consume:

    {"type": "text", "text": {"value": "See [1]", "annotations": [{"text": "[1]", ...}]}}
        -> TextResponse(text="See ")
    {"type": "image_file", "image_file": {"file_id": "file-abc"}}
        -> ImageResponse(file_id="file-abc"), url resolved on first read
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import json
import logging

from relayable.relay.errors import MalformedResponseError

LOGGER = logging.getLogger(__name__)

FileResolver = Callable[[str], Dict[str, Any]]


@dataclass(frozen=True)
class TextItem:
    value: str
    annotations: Tuple[str, ...]
    raw: Dict[str, Any]

    def to_response(self, resolver: FileResolver) -> "TextResponse":
        return TextResponse(self)


@dataclass(frozen=True)
class ImageItem:
    file_id: str
    raw: Dict[str, Any]

    def to_response(self, resolver: FileResolver) -> "ImageResponse":
        return ImageResponse(self, resolver)


ContentItem = Union[TextItem, ImageItem]


def _parse_text(payload: Dict[str, Any]) -> TextItem:
    text = payload.get("text")
    if not isinstance(text, dict) or not isinstance(text.get("value"), str):
        raise MalformedResponseError(f"Text content item has no text value: {payload}")

    literals = []
    for annotation in text.get("annotations") or []:
        if not isinstance(annotation, dict) or not isinstance(annotation.get("text"), str):
            raise MalformedResponseError(f"Invalid annotation in text content item: {annotation}")
        literals.append(annotation["text"])
    return TextItem(value=text["value"], annotations=tuple(literals), raw=payload)


def _parse_image_file(payload: Dict[str, Any]) -> ImageItem:
    image_file = payload.get("image_file")
    if not isinstance(image_file, dict) or not image_file.get("file_id"):
        raise MalformedResponseError(f"Image content item has no file id: {payload}")
    return ImageItem(file_id=image_file["file_id"], raw=payload)


_PARSERS = {
    "text": _parse_text,
    "image_file": _parse_image_file,
}


def parse_content_item(payload: Dict[str, Any]) -> ContentItem:
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Content item must be a mapping, got {type(payload).__name__}")
    parser = _PARSERS.get(payload.get("type"))
    if parser is None:
        raise MalformedResponseError(f"Unsupported content item type: {payload.get('type')}")
    return parser(payload)


def strip_annotations(value: str, annotations) -> str:
    """Remove every occurrence of every annotation literal from the text."""
    for literal in annotations:
        if literal:
            value = value.replace(literal, "")
    return value


class MessageResponse:

    def __init__(self, raw: Dict[str, Any]):
        self._raw = raw
        self._json = json.dumps(raw)

    @property
    def json(self) -> str:
        """The backend payload this response was built from, serialized verbatim."""
        return self._json

    @property
    def raw(self) -> Dict[str, Any]:
        return self._raw


class TextResponse(MessageResponse):

    def __init__(self, item: TextItem):
        super().__init__(item.raw)
        self._text = strip_annotations(item.value, item.annotations)

    @property
    def text(self) -> str:
        return self._text

    def __repr__(self):
        return f"TextResponse(text={self._text!r})"


class UrlResolution:
    """
    One-shot holder for a lazily fetched URL. Starts unresolved; once
    resolved the value never changes. An empty string is a valid resolved value.
    """

    __slots__ = ("_resolved", "_url")

    def __init__(self):
        self._resolved = False
        self._url: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self._resolved

    def resolve(self, url: str) -> str:
        if self._resolved:
            return self._url
        self._url = url
        self._resolved = True
        return self._url

    def get(self) -> str:
        if not self._resolved:
            raise LookupError("URL has not been resolved")
        return self._url


class ImageResponse(MessageResponse):

    def __init__(self, item: ImageItem, resolver: FileResolver):
        super().__init__(item.raw)
        self._file_id = item.file_id
        self._resolver = resolver
        self._url = UrlResolution()

    @property
    def file_id(self) -> str:
        return self._file_id

    @property
    def url_resolved(self) -> bool:
        return self._url.resolved

    def url(self) -> str:
        """
        Download URL for the image. The file lookup happens on the first call
        only; later calls return the cached value, even when it is empty.
        """
        if not self._url.resolved:
            payload = self._resolver(self._file_id) or {}
            url = payload.get("url") or ""
            LOGGER.debug(f"Resolved url for file {self._file_id} (empty={not url})")
            self._url.resolve(url)
        return self._url.get()

    def __repr__(self):
        return f"ImageResponse(file_id={self._file_id!r})"


NormalizedResponse = Union[TextResponse, ImageResponse]


def normalize(item: ContentItem, resolver: FileResolver) -> NormalizedResponse:
    to_response = getattr(item, "to_response", None)
    if to_response is None:
        raise MalformedResponseError(f"Cannot normalize content item {item!r}")
    return to_response(resolver)


def normalize_payloads(payloads: List[Dict[str, Any]], resolver: FileResolver) -> List[NormalizedResponse]:
    return [normalize(parse_content_item(payload), resolver) for payload in payloads]
