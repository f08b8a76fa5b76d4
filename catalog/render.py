"""
Rendering sink module for the Product Catalog Builder.

This module handles:
- Replaying the layout engine's draw commands onto a sink, in order
- Drawing onto a reportlab PDF canvas (coordinate flip, fonts, images)
- Wrapping text to a width using the sink's own font metrics
- Saving the finished document to a path or an in-memory buffer
"""

import io
from typing import BinaryIO, List, Optional, Tuple, Union

from loguru import logger
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from .config import PageSize
from .errors import RenderError
from .layout import AddPage, DrawCommand, DrawImage, DrawLine, DrawText, FillRect
from .models import DecodedImage, RGBColor


REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
EMBEDDED_FONT = "CatalogSans"
EMBEDDED_BOLD_FONT = "CatalogSans-Bold"
LINE_HEIGHT_FACTOR = 1.15


def register_fonts(font_file: Optional[str] = None,
                   bold_font_file: Optional[str] = None) -> Tuple[str, str]:
    """
    Register TrueType fonts for catalog text and return (regular, bold) font names.

    The built-in Helvetica fonts only cover Latin-1, so names, prices or a
    currency sign outside it need an embedded TTF. Without ``font_file`` the
    built-in fonts are used; without ``bold_font_file`` bold text uses the
    regular file.
    """
    if not font_file:
        return REGULAR_FONT, BOLD_FONT

    try:
        pdfmetrics.registerFont(TTFont(EMBEDDED_FONT, font_file))
        pdfmetrics.registerFont(TTFont(EMBEDDED_BOLD_FONT, bold_font_file or font_file))
    except (TTFError, OSError) as e:
        logger.error(f"Could not load catalog font {font_file}: {e}")
        raise RenderError(
            f"Could not load font: {e}",
            details={'font_file': font_file, 'bold_font_file': bold_font_file},
            suggestions=["Check the FONT_FILE setting points to a TrueType font"]
        )

    logger.debug(f"Registered catalog fonts from {font_file}")
    return EMBEDDED_FONT, EMBEDDED_BOLD_FONT


class PdfSink:
    """Draws catalog commands onto a reportlab canvas.

    Commands use a top-left origin; reportlab's origin is bottom-left, so
    every y coordinate is flipped against the page height.
    """

    def __init__(self, page_size: PageSize, title: str = None,
                 font_file: Optional[str] = None, bold_font_file: Optional[str] = None):
        self.page_size = page_size
        self.regular_font, self.bold_font = register_fonts(font_file, bold_font_file)
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=tuple(page_size))
        if title:
            self.canvas.setTitle(title)
        self.page_count = 1

    def _flip(self, y: float) -> float:
        return self.page_size.height - y

    @staticmethod
    def _rgb(color: RGBColor):
        return tuple(channel / 255 for channel in color)

    def font_name(self, bold: bool) -> str:
        return self.bold_font if bold else self.regular_font

    def fill_rect(self, x: float, y: float, width: float, height: float, color: RGBColor) -> None:
        self.canvas.setFillColorRGB(*self._rgb(color))
        self.canvas.rect(x, self._flip(y + height), width, height, stroke=0, fill=1)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: RGBColor, width: float) -> None:
        self.canvas.setStrokeColorRGB(*self._rgb(color))
        self.canvas.setLineWidth(width)
        self.canvas.line(x1, self._flip(y1), x2, self._flip(y2))

    def draw_image(self, image: DecodedImage, x: float, y: float, width: float, height: float) -> None:
        reader = ImageReader(image.raster)
        mask = 'auto' if image.raster.mode == 'RGBA' else None
        self.canvas.drawImage(reader, x, self._flip(y + height), width=width, height=height, mask=mask)

    def draw_text(self, lines: List[str], x: float, y: float, font_size: float,
                  bold: bool = False, color: RGBColor = (0, 0, 0), align: str = 'center') -> None:
        self.canvas.setFont(self.font_name(bold), font_size)
        self.canvas.setFillColorRGB(*self._rgb(color))
        line_height = font_size * LINE_HEIGHT_FACTOR

        for offset, line in enumerate(lines):
            baseline = self._flip(y + offset * line_height)
            if align == 'center':
                self.canvas.drawCentredString(x, baseline, line)
            elif align == 'right':
                self.canvas.drawRightString(x, baseline, line)
            else:
                self.canvas.drawString(x, baseline, line)

    def add_page(self) -> None:
        self.canvas.showPage()
        self.page_count += 1

    def wrap_text(self, text: str, max_width: float, font_size: float, bold: bool = False) -> List[str]:
        """Split text into lines no wider than max_width in the sink's font."""
        return simpleSplit(text, self.font_name(bold), font_size, max_width)

    def save(self, target: Optional[Union[str, BinaryIO]] = None) -> bytes:
        """Finish the document and return its bytes, also writing to ``target`` if given."""
        self.canvas.save()
        data = self.buffer.getvalue()

        if isinstance(target, str):
            with open(target, 'wb') as f:
                f.write(data)
        elif target is not None:
            target.write(data)

        logger.info(f"Saved catalog PDF: {self.page_count} pages, {len(data)} bytes")
        return data


def render_commands(commands: List[DrawCommand], sink) -> None:
    """Replay a command stream onto a sink in order."""
    for command in commands:
        try:
            if isinstance(command, FillRect):
                sink.fill_rect(command.x, command.y, command.width, command.height, command.color)
            elif isinstance(command, DrawLine):
                sink.draw_line(command.x1, command.y1, command.x2, command.y2, command.color, command.width)
            elif isinstance(command, DrawImage):
                sink.draw_image(command.image, command.x, command.y, command.width, command.height)
            elif isinstance(command, DrawText):
                sink.draw_text(list(command.lines), command.x, command.y, command.font_size,
                               command.bold, command.color, command.align)
            elif isinstance(command, AddPage):
                sink.add_page()
            else:
                raise RenderError(f"Unknown draw command: {type(command).__name__}")
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(
                f"Failed to draw {type(command).__name__}: {e}",
                details={'command': type(command).__name__},
                suggestions=["Try different product images"]
            )


def create_pdf_sink(page_size: PageSize, title: str = None,
                    font_file: Optional[str] = None, bold_font_file: Optional[str] = None) -> PdfSink:
    """Factory function to create a PdfSink instance."""
    return PdfSink(page_size, title, font_file, bold_font_file)
