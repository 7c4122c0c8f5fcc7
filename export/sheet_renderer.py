"""Renders one sheet of labels as an image using Pillow."""

from io import BytesIO
from typing import Optional, Sequence

from PIL import Image, ImageDraw

from models.label_config import Options, Template
from models.label_data import LabelInstance
from utils.fonts import load_font
from utils.geometry import percent_to_pixels
from utils.value_format import format_field, label_text

PAGE_WIDTH_IN = 8.5
PAGE_HEIGHT_IN = 11.0
LABEL_PADDING_IN = 0.05
OUTLINE_COLOR = "#c8c8c8"


def _points_to_pixels(size_pt: float, dpi: int) -> int:
    return max(int(round(size_pt * dpi / 72.0)), 1)


def _draw_fields(draw: ImageDraw.ImageDraw, label: LabelInstance,
                 left: float, top: float, width: int, height: int, dpi: int) -> None:
    """Visual editor layout: every field at its own position and style."""
    anchor_map = {"left": "la", "center": "ma", "right": "ra"}
    for field in label.fields:
        text = format_field(field)
        if not text:
            continue
        fmt = field.formatting
        font = load_font(_points_to_pixels(fmt.font_size, dpi), fmt.font_weight == "bold")
        x, y = percent_to_pixels(field.position, width, height, left, top)
        draw.text((x, y), text, fill=fmt.color, font=font, anchor=anchor_map.get(fmt.align, "la"))


def _draw_text_block(draw: ImageDraw.ImageDraw, label: LabelInstance, options: Options,
                     left: float, top: float, width: int, dpi: int) -> None:
    """Plain layout: all fields as one block of text in the global style."""
    text = label_text(label, options)
    if not text:
        return
    size_px = _points_to_pixels(options.font_size, dpi)
    font = load_font(size_px)
    pad = LABEL_PADDING_IN * dpi
    spacing = max(size_px * (float(options.line_spacing) - 1.0), 0)
    align = options.text_align if options.text_align in ("left", "center", "right") else "left"
    anchor_x = {"left": left + pad, "center": left + width / 2, "right": left + width - pad}[align]
    anchor = {"left": "la", "center": "ma", "right": "ra"}[align]
    draw.multiline_text((anchor_x, top + pad), text, fill=options.font_color, font=font,
                        anchor=anchor, spacing=spacing, align=align)


def render_page(
    page: Sequence[Optional[LabelInstance]],
    options: Options,
    dpi: int = 72,
    template: Optional[Template] = None,
) -> Image.Image:
    """Render a complete sheet.

    Args:
        page: Label slots of one sheet; None slots stay blank.
        options: Label settings (template, global style, editor mode).
        dpi: Pixels per inch of the output image.
        template: Sheet layout; defaults to the one selected in options.

    Returns:
        PIL Image of the whole letter-size sheet.
    """
    template = template or options.template
    page_w = int(PAGE_WIDTH_IN * dpi)
    page_h = int(PAGE_HEIGHT_IN * dpi)
    sheet = Image.new("RGB", (page_w, page_h), "white")
    draw = ImageDraw.Draw(sheet)

    cols = template.columns
    rows = template.rows
    label_w = int(template.label_width * dpi)
    label_h = int(template.label_height * dpi)

    # Spread the leftover page width/height evenly around the labels
    gap_x = max(page_w - cols * label_w, 0) / (cols + 1)
    gap_y = max(page_h - rows * label_h, 0) / (rows + 1)

    for slot, label in enumerate(page):
        col = slot % cols
        row = slot // cols
        left = gap_x + col * (label_w + gap_x)
        top = gap_y + row * (label_h + gap_y)
        draw.rectangle((left, top, left + label_w, top + label_h), outline=OUTLINE_COLOR)
        if label is None:
            continue
        if options.visual_editor_mode:
            _draw_fields(draw, label, left, top, label_w, label_h, dpi)
        else:
            _draw_text_block(draw, label, options, left, top, label_w, dpi)

    return sheet


def render_page_png(page: Sequence[Optional[LabelInstance]], options: Options, dpi: int = 72) -> bytes:
    buf = BytesIO()
    render_page(page, options, dpi).save(buf, format="PNG")
    return buf.getvalue()
