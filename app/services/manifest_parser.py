"""
Manifest Extraction

Best-effort reader for imsmanifest.xml descriptors. Values are pulled out with
first-match regular expressions rather than a real XML parser, so uploads with
broken or partial manifests still produce whatever fields can be found.

Known limitation: each scalar lookup takes the first match in its search
window, so only the first <organization> of every <organizations> block is
reported and sibling tags sharing a name elsewhere in the document can shadow
the intended value.
"""

import logging
import re
from typing import Optional

from ..models.package import Manifest, OrganizationInfo, ResourceInfo

logger = logging.getLogger(__name__)


class ManifestParseError(Exception):
    """Raised internally when a manifest cannot be parsed at all."""


_ORGANIZATIONS_BLOCK = re.compile(r"<organizations[^>]*>(.*?)</organizations>", re.DOTALL)
_RESOURCE_BLOCK = re.compile(r"<resource(?=[\s/>])[^>]*?(?:/>|>.*?</resource>)", re.DOTALL)


def extract_xml_value(xml: str, tag: str, attribute: Optional[str] = None) -> Optional[str]:
    """
    Return the first value for ``tag`` in ``xml``.

    Without ``attribute`` this is the text between ``<tag ...>`` and the next
    ``<``; with it, the quoted value of ``attribute`` on the first ``<tag``
    carrying it. The tag name must be followed by whitespace, ``>`` or ``/``
    so ``organization`` does not match ``<organizations>``.
    """
    tag_open = rf"<{re.escape(tag)}(?=[\s/>])[^>]*"
    if attribute:
        pattern = tag_open + rf"\b{re.escape(attribute)}=\"([^\"]*)\""
    else:
        pattern = tag_open + r">([^<]*)<"
    match = re.search(pattern, xml, re.IGNORECASE)
    return match.group(1) if match else None


def _parse_organization(block: str) -> OrganizationInfo:
    return OrganizationInfo(
        identifier=extract_xml_value(block, "organization", "identifier"),
        title=extract_xml_value(block, "title"),
    )


def _parse_resource(block: str) -> ResourceInfo:
    return ResourceInfo(
        identifier=extract_xml_value(block, "resource", "identifier"),
        href=extract_xml_value(block, "resource", "href"),
    )


def _parse(xml_content: str) -> Manifest:
    if not isinstance(xml_content, str):
        raise ManifestParseError(
            f"Manifest content must be text, got {type(xml_content).__name__}"
        )

    identifier = extract_xml_value(xml_content, "manifest", "identifier")
    if identifier is None:
        identifier = extract_xml_value(xml_content, "identifier")

    organizations = [
        _parse_organization(match.group(0))
        for match in _ORGANIZATIONS_BLOCK.finditer(xml_content)
    ]
    resources = [
        _parse_resource(match.group(0))
        for match in _RESOURCE_BLOCK.finditer(xml_content)
    ]

    return Manifest(
        identifier=identifier,
        title=extract_xml_value(xml_content, "title"),
        organizations=organizations,
        resources=resources,
    )


def parse_manifest(xml_content: str) -> Optional[Manifest]:
    """
    Parse manifest text into a Manifest.

    Never raises. Returns a Manifest with empty fields when nothing could be
    found, and None when parsing failed outright.
    """
    try:
        return _parse(xml_content)
    except Exception as e:
        logger.error("Error parsing manifest: %s", e)
        return None
