"""Pure OCR transformation helpers for receipt parsing."""

from collections.abc import Mapping
from typing import Any

from sitespend.domain.receipt import RecognizedDocument, TextAnnotation


class InvalidOCRResult(ValueError):
    """Raised when an OCR payload carries no usable transcription."""


def _mapping_field(container: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return a nested object; missing or null means empty."""
    value = container.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidOCRResult(f"OCR field {key!r} must be an object, got {type(value).__name__}")
    return value


def _list_field(container: Mapping[str, Any], key: str) -> list[Any]:
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidOCRResult(f"OCR field {key!r} must be a list, got {type(value).__name__}")
    return value


def _text_field(container: Mapping[str, Any], key: str) -> str:
    if key not in container:
        return ""
    value = container[key]
    if not isinstance(value, str):
        raise InvalidOCRResult(f"OCR field {key!r} must be a string, got {type(value).__name__}")
    return value


def _confidence_field(container: Mapping[str, Any]) -> float:
    value = container.get("confidence")
    if value is None:
        return 0.0
    # bool is an int subclass but never a confidence
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidOCRResult(f"OCR confidence must be a number, got {type(value).__name__}")
    return float(value)


def _bbox_from_vertices(vertices: list[Mapping[str, Any]]) -> tuple[tuple[float, float], ...]:
    """Collapse a Vision-style vertex polygon into ((x_min, y_min), (x_max, y_max))."""
    if not vertices:
        return ()
    # Vision omits zero coordinates from its JSON output
    x_coords = [float(v.get("x", 0)) for v in vertices]
    y_coords = [float(v.get("y", 0)) for v in vertices]
    return ((min(x_coords), min(y_coords)), (max(x_coords), max(y_coords)))


def _bbox_from_points(points: list[list[float]]) -> tuple[tuple[float, float], ...]:
    """Collapse a list of [x, y] points into ((x_min, y_min), (x_max, y_max))."""
    if not points:
        return ()
    x_coords = [float(p[0]) for p in points]
    y_coords = [float(p[1]) for p in points]
    return ((min(x_coords), min(y_coords)), (max(x_coords), max(y_coords)))


def _vision_annotation(annotation: Any) -> TextAnnotation:
    if not isinstance(annotation, Mapping):
        raise InvalidOCRResult("Vision text annotations must be objects")
    vertices = _list_field(_mapping_field(annotation, "boundingPoly"), "vertices")
    try:
        bbox = _bbox_from_vertices(vertices)
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidOCRResult(f"Malformed bounding polygon: {exc}") from exc
    return TextAnnotation(text=_text_field(annotation, "description"), bbox=bbox)


def _flat_annotation(annotation: Any) -> TextAnnotation:
    if not isinstance(annotation, Mapping):
        raise InvalidOCRResult("OCR annotations must be objects")
    try:
        bbox = _bbox_from_points(_list_field(annotation, "bbox"))
    except (IndexError, TypeError, ValueError) as exc:
        raise InvalidOCRResult(f"Malformed annotation bbox: {exc}") from exc
    return TextAnnotation(text=_text_field(annotation, "text"), bbox=bbox)


def _transform_vision_result(raw_result: Mapping[str, Any]) -> RecognizedDocument:
    """
    Transform a Google-Vision-style response into a RecognizedDocument.

    Expected shape (the second response is optional):
        {
          "document": {"fullTextAnnotation": {...}, "textAnnotations": [...]},
          "text": {"fullTextAnnotation": {...}}
        }
    A bare document response (without the wrapper) is accepted too.
    """
    document = _mapping_field(raw_result, "document") if "document" in raw_result else raw_result
    full_annotation = _mapping_field(document, "fullTextAnnotation")

    pages = _list_field(full_annotation, "pages")
    first_page = pages[0] if pages else {}
    if not isinstance(first_page, Mapping):
        raise InvalidOCRResult("Vision pages must be objects")

    # Vision's textAnnotations[0] repeats the whole text; the rest are words.
    annotations = tuple(_vision_annotation(a) for a in _list_field(document, "textAnnotations")[1:])

    alternate = _mapping_field(_mapping_field(raw_result, "text"), "fullTextAnnotation")
    return RecognizedDocument(
        full_text=_text_field(full_annotation, "text"),
        alternate_text=_text_field(alternate, "text"),
        annotations=annotations,
        confidence=_confidence_field(first_page),
    )


def _transform_flat_result(raw_result: Mapping[str, Any]) -> RecognizedDocument:
    """Transform the flat cached shape: full_text, alternate_text, confidence, annotations."""
    return RecognizedDocument(
        full_text=_text_field(raw_result, "full_text"),
        alternate_text=_text_field(raw_result, "alternate_text"),
        annotations=tuple(_flat_annotation(a) for a in _list_field(raw_result, "annotations")),
        confidence=_confidence_field(raw_result),
    )


def document_from_ocr_json(raw_result: Mapping[str, Any]) -> RecognizedDocument:
    """
    Build a RecognizedDocument from an OCR service payload.

    Raises:
        InvalidOCRResult: payload is not a mapping, a field has the wrong
            type, or it carries no text at all
    """
    if not isinstance(raw_result, Mapping):
        raise InvalidOCRResult(f"OCR result must be a JSON object, got {type(raw_result).__name__}")

    if "full_text" in raw_result:
        document = _transform_flat_result(raw_result)
    else:
        document = _transform_vision_result(raw_result)

    if not document.full_text.strip() and not document.alternate_text.strip():
        raise InvalidOCRResult("OCR result contains no recognized text")
    return document
