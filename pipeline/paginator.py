"""Arranging label instances onto fixed-capacity sheets."""

from typing import List, Optional, Sequence

from models.label_config import Template
from models.label_data import LabelInstance

Page = List[Optional[LabelInstance]]


def arrange_labels(
    labels: Sequence[LabelInstance],
    template: Template,
    blanks: Optional[int] = 0,
) -> List[Page]:
    """Split labels into pages of ``template.per_page`` slots.

    The first ``blanks`` slots stay empty (None) so a partly used sheet can
    be fed again. The last page is padded with None, and there is always at
    least one page.
    """
    per_page = max(int(template.per_page), 1)
    slots: List[Optional[LabelInstance]] = [None] * max(int(blanks or 0), 0)
    slots.extend(labels)

    pages: List[Page] = [slots[start:start + per_page] for start in range(0, len(slots), per_page)]
    if not pages:
        pages.append([])
    last = pages[-1]
    last.extend([None] * (per_page - len(last)))
    return pages
