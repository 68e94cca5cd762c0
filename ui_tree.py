"""
UI Tree - accessibility snapshot model and text extraction.

A snapshot is a tree of UiNode objects. Classifiers never look at the tree
directly; they work on the flat, ordered list of labels produced by
collect_all_texts().
"""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class UiNode:
    """One node of an accessibility snapshot."""
    text: Optional[str] = None
    desc: Optional[str] = None          # content description
    class_name: Optional[str] = None    # e.g. android.widget.ImageView
    resource_id: Optional[str] = None   # e.g. com.instagram.android:id/clips_tab
    children: List['UiNode'] = field(default_factory=list)


def collect_all_texts(root: Optional[UiNode]) -> List[str]:
    """Collect every non-blank text and description label in the tree.

    Depth-first, pre-order. For each node its text comes before its
    description. Duplicates are kept and nothing is normalized.

    Args:
        root: Snapshot root, or None when no window is available.

    Returns:
        Ordered list of labels (empty if root is None).
    """
    out = []
    if root is None:
        return out

    stack = [root]
    while stack:
        node = stack.pop()

        if node.text and node.text.strip():
            out.append(node.text)
        if node.desc and node.desc.strip():
            out.append(node.desc)

        # Reversed so the first child is visited first
        stack.extend(reversed(node.children))

    return out


def _node_from_element(elem: ET.Element) -> UiNode:
    return UiNode(
        text=elem.get('text') or None,
        desc=elem.get('content-desc') or None,
        class_name=elem.get('class') or elem.tag,
        resource_id=elem.get('resource-id') or None,
    )


def parse_ui_xml(xml_str: str) -> Optional[UiNode]:
    """Build a UiNode tree from a uiautomator / Appium page source dump.

    Args:
        xml_str: Raw XML (anything before '<?xml' is ignored, adb prints
                 a status line there).

    Returns:
        Root UiNode, or None if the dump is empty or unparseable.
    """
    if not xml_str:
        return None

    start = xml_str.find('<?xml')
    xml_clean = xml_str[start:] if start >= 0 else xml_str.lstrip()
    if not xml_clean.startswith('<'):
        return None

    try:
        xml_root = ET.fromstring(xml_clean)
    except ET.ParseError as e:
        logger.warning(f"XML parse error: {e}")
        return None

    root = _node_from_element(xml_root)
    stack = [(xml_root, root)]
    while stack:
        elem, node = stack.pop()
        for child_elem in elem:
            child = _node_from_element(child_elem)
            node.children.append(child)
            stack.append((child_elem, child))

    return root
