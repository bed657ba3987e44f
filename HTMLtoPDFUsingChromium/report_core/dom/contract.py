"""
HTML Contract Inspection
========================

Static check of a report's HTML against the ``DomContract`` before it is
sent to the browser. Nothing here is fatal: missing elements only degrade
the output (no page numbers, placeholder headers), so problems are
returned as warnings for the caller to log.
"""

from dataclasses import dataclass, field
from typing import List
import logging

from lxml import etree, html as lxml_html

from .projection import DomContract

logger = logging.getLogger(__name__)


def _class_xpath(class_name: str) -> str:
    return f"//*[contains(concat(' ', normalize-space(@class), ' '), ' {class_name} ')]"


@dataclass
class ContractReport:
    """Result of inspecting a report HTML document."""
    section_count: int = 0
    toc_entry_count: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings

    def log(self) -> None:
        for warning in self.warnings:
            logger.warning(warning)


def inspect_html(source: str, contract: DomContract = None) -> ContractReport:
    """
    Check that ``source`` provides the elements the pipeline relies on.

    Args:
        source: Report HTML text
        contract: Element ids/classes to look for (defaults to DomContract())

    Returns:
        ContractReport listing every missing element
    """
    contract = contract or DomContract()
    report = ContractReport()

    try:
        root = lxml_html.document_fromstring(source)
    except (etree.ParserError, ValueError) as e:
        report.warnings.append(f"HTML could not be parsed: {e}")
        return report

    def by_id(element_id: str):
        found = root.xpath("//*[@id=$element_id]", element_id=element_id)
        return found[0] if found else None

    sections = root.xpath("//section")
    report.section_count = len(sections)

    cover = by_id(contract.cover_section_id)
    if cover is None or cover.tag != "section":
        report.warnings.append(f"Cover section 'section#{contract.cover_section_id}' not found")
    elif sections and sections[0] is not cover:
        report.warnings.append(f"Cover section '#{contract.cover_section_id}' is not the first section")

    toc = by_id(contract.toc_container_id)
    if toc is None:
        report.warnings.append(f"Table of contents '#{contract.toc_container_id}' not found")
    else:
        entries = list(toc.iterchildren(tag=etree.Element))
        report.toc_entry_count = len(entries)
        for index, entry in enumerate(entries):
            first = next(entry.iterchildren(tag=etree.Element), None)
            if first is None or first.tag != "a":
                report.warnings.append(f"Table of contents entry {index} has no link as first child")

    if not root.xpath(_class_xpath(contract.total_pages_class)):
        report.warnings.append(f"Total page count node '.{contract.total_pages_class}' not found")

    for element_id in (
        contract.first_page_header_id,
        contract.first_page_footer_id,
        contract.header_id,
        contract.footer_id,
    ):
        if by_id(element_id) is None:
            report.warnings.append(f"Header/footer element '#{element_id}' not found")

    return report
