"""
Converts MPD documents to and from the manifest model.

Parsing is namespace-agnostic and forward compatible: elements and attributes
outside the modelled subset are ignored rather than rejected.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from lxml import etree

from maguro.exceptions import InvalidValueError, MissingFieldError, ParseError

from .manifest import (
    AdaptationSet,
    Initialization,
    Manifest,
    Period,
    Representation,
    Role,
    SegmentBase,
    SegmentList,
    SegmentTemplate,
    SegmentURL,
)

log = logging.getLogger(__name__)

MPD_NAMESPACE = "urn:mpeg:dash:schema:mpd:2011"

T = TypeVar("T")


def _local(element: etree._Element) -> str:
    return etree.QName(element).localname


def _children(element: etree._Element, name: str) -> list[etree._Element]:
    # Comments and processing instructions have a non-string tag.
    return [
        child
        for child in element
        if isinstance(child.tag, str) and _local(child) == name
    ]


def _child(element: etree._Element, name: str) -> etree._Element | None:
    found = _children(element, name)
    return found[0] if found else None


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(raw)


def _parse_frame_rate(raw: str) -> float:
    if "/" not in raw:
        return float(raw)
    numerator, denominator = raw.split("/")
    return float(numerator) / float(denominator)


class _Reader:
    """Attribute accessors that report failures with a document path."""

    def __init__(self, element: etree._Element, path: str):
        self.element = element
        self.path = path

    def optional(
        self, name: str, convert: Callable[[str], T] = str
    ) -> T | None:
        raw = self.element.get(name)
        if raw is None:
            return None
        try:
            return convert(raw)
        except (ValueError, ZeroDivisionError):
            raise InvalidValueError(f"{self.path}@{name}", raw) from None

    def required(self, name: str, convert: Callable[[str], T] = str) -> T:
        value = self.optional(name, convert)
        if value is None:
            raise MissingFieldError(f"{self.path}@{name}")
        return value


def _base_url(element: etree._Element) -> str | None:
    node = _child(element, "BaseURL")
    if node is None or node.text is None:
        return None
    return node.text.strip()


def _parse_initialization(element: etree._Element, path: str) -> Initialization:
    return Initialization(source_url=_Reader(element, path).required("sourceURL"))


def _parse_segment_list(element: etree._Element, path: str) -> SegmentList:
    reader = _Reader(element, path)
    init_node = _child(element, "Initialization")
    if init_node is None:
        raise MissingFieldError(f"{path}/Initialization")

    segment_urls = tuple(
        SegmentURL(media=_Reader(node, f"{path}/SegmentURL[{i}]").required("media"))
        for i, node in enumerate(_children(element, "SegmentURL"))
    )
    return SegmentList(
        initialization=_parse_initialization(init_node, f"{path}/Initialization"),
        segment_urls=segment_urls,
        duration=reader.optional("duration", int),
        timescale=reader.optional("timescale", int),
    )


def _parse_segment_base(element: etree._Element, path: str) -> SegmentBase:
    init_node = _child(element, "Initialization")
    initialization = None
    if init_node is not None and init_node.get("sourceURL") is not None:
        initialization = _parse_initialization(init_node, f"{path}/Initialization")
    return SegmentBase(
        index_range=element.get("indexRange"), initialization=initialization
    )


def _parse_segment_template(element: etree._Element, path: str) -> SegmentTemplate:
    reader = _Reader(element, path)
    return SegmentTemplate(
        media=reader.optional("media"),
        initialization=reader.optional("initialization"),
        start_number=reader.optional("startNumber", int),
        duration=reader.optional("duration", int),
        timescale=reader.optional("timescale", int),
    )


def _parse_representation(
    element: etree._Element, path: str, inherited_base_url: str | None
) -> Representation:
    reader = _Reader(element, path)

    segment_list = segment_base = segment_template = None
    if (node := _child(element, "SegmentList")) is not None:
        segment_list = _parse_segment_list(node, f"{path}/SegmentList")
    if (node := _child(element, "SegmentBase")) is not None:
        segment_base = _parse_segment_base(node, f"{path}/SegmentBase")
    if (node := _child(element, "SegmentTemplate")) is not None:
        segment_template = _parse_segment_template(node, f"{path}/SegmentTemplate")

    return Representation(
        id=reader.required("id"),
        bandwidth=reader.required("bandwidth", int),
        codecs=reader.optional("codecs"),
        mime_type=reader.optional("mimeType"),
        width=reader.optional("width", int),
        height=reader.optional("height", int),
        frame_rate=reader.optional("frameRate", _parse_frame_rate),
        audio_sampling_rate=reader.optional("audioSamplingRate", int),
        quality_ranking=reader.optional("qualityRanking", int),
        dependency_id=reader.optional("dependencyId"),
        base_url=_base_url(element) or inherited_base_url,
        segment_list=segment_list,
        segment_base=segment_base,
        segment_template=segment_template,
    )


def _parse_adaptation_set(
    element: etree._Element, path: str, inherited_base_url: str | None
) -> AdaptationSet:
    reader = _Reader(element, path)
    base_url = _base_url(element) or inherited_base_url

    role = None
    if (role_node := _child(element, "Role")) is not None:
        role_reader = _Reader(role_node, f"{path}/Role")
        role = Role(
            scheme_id_uri=role_reader.required("schemeIdUri"),
            value=role_reader.required("value"),
        )

    representations = tuple(
        _parse_representation(node, f"{path}/Representation[{i}]", base_url)
        for i, node in enumerate(_children(element, "Representation"))
    )
    return AdaptationSet(
        id=reader.optional("id", int),
        mime_type=reader.optional("mimeType"),
        content_type=reader.optional("contentType"),
        lang=reader.optional("lang"),
        segment_alignment=reader.optional("segmentAlignment", _parse_bool),
        subsegment_alignment=reader.optional("subsegmentAlignment", _parse_bool),
        role=role,
        representations=representations,
    )


def _parse_period(
    element: etree._Element, path: str, inherited_base_url: str | None
) -> Period:
    base_url = _base_url(element) or inherited_base_url
    return Period(
        adaptation_sets=tuple(
            _parse_adaptation_set(node, f"{path}/AdaptationSet[{i}]", base_url)
            for i, node in enumerate(_children(element, "AdaptationSet"))
        )
    )


def parse(document: str | bytes) -> Manifest:
    """
    Parses an MPD document into a `Manifest`.

    Args:
        document: The complete XML document, as text or raw bytes.

    Returns:
        The parsed manifest. A document without periods yields an empty manifest.

    Raises:
        ParseError: If the document is not well-formed XML or its root is not MPD.
        MissingFieldError: If a required element or attribute is absent.
        InvalidValueError: If a numeric or boolean field cannot be converted.
    """
    if isinstance(document, str):
        document = document.encode("utf-8")

    try:
        root = etree.fromstring(document, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed manifest document: {e}") from e

    if _local(root) != "MPD":
        raise ParseError(f"Unexpected root element '{_local(root)}', expected 'MPD'.")

    reader = _Reader(root, "MPD")
    base_url = _base_url(root)
    periods = tuple(
        _parse_period(node, f"MPD/Period[{i}]", base_url)
        for i, node in enumerate(_children(root, "Period"))
    )
    manifest = Manifest(
        periods=periods,
        mpd_type=reader.optional("type") or "static",
        media_presentation_duration=reader.optional("mediaPresentationDuration"),
    )
    log.debug(
        f"Parsed manifest with {len(periods)} period(s) and "
        f"{len(manifest.streams())} adaptation set(s)."
    )
    return manifest


def _set(element: etree._Element, name: str, value: object) -> None:
    if value is None:
        return
    if isinstance(value, bool):
        element.set(name, "true" if value else "false")
    elif isinstance(value, float) and value.is_integer():
        element.set(name, str(int(value)))
    else:
        element.set(name, str(value))


def _sub(parent: etree._Element, name: str) -> etree._Element:
    return etree.SubElement(parent, f"{{{MPD_NAMESPACE}}}{name}")


def _write_representation(parent: etree._Element, rep: Representation) -> None:
    node = _sub(parent, "Representation")
    _set(node, "id", rep.id)
    _set(node, "bandwidth", rep.bandwidth)
    _set(node, "codecs", rep.codecs)
    _set(node, "mimeType", rep.mime_type)
    _set(node, "width", rep.width)
    _set(node, "height", rep.height)
    _set(node, "frameRate", rep.frame_rate)
    _set(node, "audioSamplingRate", rep.audio_sampling_rate)
    _set(node, "qualityRanking", rep.quality_ranking)
    _set(node, "dependencyId", rep.dependency_id)

    if rep.base_url is not None:
        _sub(node, "BaseURL").text = rep.base_url

    if rep.segment_list is not None:
        seg_list = _sub(node, "SegmentList")
        _set(seg_list, "duration", rep.segment_list.duration)
        _set(seg_list, "timescale", rep.segment_list.timescale)
        _set(
            _sub(seg_list, "Initialization"),
            "sourceURL",
            rep.segment_list.initialization.source_url,
        )
        for segment in rep.segment_list.segment_urls:
            _set(_sub(seg_list, "SegmentURL"), "media", segment.media)

    if rep.segment_base is not None:
        seg_base = _sub(node, "SegmentBase")
        _set(seg_base, "indexRange", rep.segment_base.index_range)
        if rep.segment_base.initialization is not None:
            _set(
                _sub(seg_base, "Initialization"),
                "sourceURL",
                rep.segment_base.initialization.source_url,
            )

    if (template := rep.segment_template) is not None:
        seg_template = _sub(node, "SegmentTemplate")
        _set(seg_template, "media", template.media)
        _set(seg_template, "initialization", template.initialization)
        _set(seg_template, "startNumber", template.start_number)
        _set(seg_template, "duration", template.duration)
        _set(seg_template, "timescale", template.timescale)


def serialize(manifest: Manifest) -> str:
    """Writes a `Manifest` back out as an MPD document."""
    root = etree.Element(f"{{{MPD_NAMESPACE}}}MPD", nsmap={None: MPD_NAMESPACE})
    _set(root, "type", manifest.mpd_type)
    _set(root, "mediaPresentationDuration", manifest.media_presentation_duration)

    for period in manifest.periods:
        period_node = _sub(root, "Period")
        for aset in period.adaptation_sets:
            aset_node = _sub(period_node, "AdaptationSet")
            _set(aset_node, "id", aset.id)
            _set(aset_node, "mimeType", aset.mime_type)
            _set(aset_node, "contentType", aset.content_type)
            _set(aset_node, "lang", aset.lang)
            _set(aset_node, "segmentAlignment", aset.segment_alignment)
            _set(aset_node, "subsegmentAlignment", aset.subsegment_alignment)
            if aset.role is not None:
                role_node = _sub(aset_node, "Role")
                _set(role_node, "schemeIdUri", aset.role.scheme_id_uri)
                _set(role_node, "value", aset.role.value)
            for rep in aset.representations:
                _write_representation(aset_node, rep)

    return etree.tostring(
        root, xml_declaration=True, encoding="UTF-8", pretty_print=True
    ).decode("utf-8")
