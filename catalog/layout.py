"""
Layout engine module for the Product Catalog Builder.

This module handles:
- The cover page (background, centered logo, company name)
- Paginating catalog entries onto a fixed 2x2 grid of cells
- Positioning name, image, price and description inside each cell
- Emitting the result as an ordered stream of draw commands

Coordinates use a top-left origin in points; text ``y`` is the baseline.
The stream is replayed by a rendering sink in order, so later commands paint
over earlier ones.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from loguru import logger

from .config import AppConfig, PageSize, get_config
from .errors import MissingCompanyNameError, MissingLogoError, NoEntriesError
from .models import CatalogEntry, DecodedImage, RGBColor


GRID_COLUMNS = 2
GRID_ROWS = 2
CELLS_PER_PAGE = GRID_COLUMNS * GRID_ROWS

DEFAULT_MARGIN = 40.0
TEXT_COLOR = RGBColor(20, 20, 20)
DIVIDER_COLOR = RGBColor(200, 200, 200)
DIVIDER_WIDTH = 0.5

COVER_LOGO_RATIO = 0.5
COVER_LOGO_LIFT = 60
COVER_TITLE_GAP = 60
COVER_TITLE_SIZE = 36

CELL_IMAGE_RATIO = 0.55
NAME_SIZE = 14
NAME_BASELINE = 14
IMAGE_TOP = 24
PRICE_SIZE = 12
PRICE_OFFSET = 50
DESCRIPTION_SIZE = 10
DESCRIPTION_OFFSET = 70
DESCRIPTION_PADDING = 20

# wrap_text(text, max_width, font_size, bold) -> lines
TextWrapper = Callable[[str, float, float, bool], List[str]]


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: RGBColor


@dataclass(frozen=True)
class DrawLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: RGBColor
    width: float


@dataclass(frozen=True)
class DrawImage:
    image: DecodedImage
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class DrawText:
    lines: Tuple[str, ...]
    x: float
    y: float
    font_size: float
    bold: bool = False
    color: RGBColor = TEXT_COLOR
    align: str = 'center'

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class AddPage:
    pass


DrawCommand = Union[FillRect, DrawLine, DrawImage, DrawText, AddPage]


class CellPosition:
    """Represents one grid cell of a product page."""

    def __init__(self, page: int, row: int, column: int,
                 x: float, y: float, width: float, height: float):
        self.page = page
        self.row = row
        self.column = column
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def __repr__(self) -> str:
        return (f"CellPosition(page={self.page}, row={self.row}, column={self.column}, "
                f"x={self.x:.2f}, y={self.y:.2f}, width={self.width:.2f}, height={self.height:.2f})")


def grid_slot(index: int) -> Tuple[int, int, int]:
    """Return (page, row, column) for the entry at ``index``."""
    slot = index % CELLS_PER_PAGE
    return index // CELLS_PER_PAGE, slot // GRID_COLUMNS, slot % GRID_COLUMNS


def cell_position(index: int, page_size: PageSize, margin: float = DEFAULT_MARGIN) -> CellPosition:
    """Geometry of the cell holding the entry at ``index``."""
    page, row, column = grid_slot(index)
    cell_width = (page_size.width - margin * 2) / GRID_COLUMNS
    row_height = (page_size.height - margin * 2) / GRID_ROWS
    return CellPosition(
        page=page,
        row=row,
        column=column,
        x=margin + column * cell_width,
        y=margin + row * row_height,
        width=cell_width,
        height=row_height,
    )


def product_page_count(entry_count: int) -> int:
    return math.ceil(entry_count / CELLS_PER_PAGE)


def count_pages(commands: List[DrawCommand]) -> int:
    """Total pages in a command stream: the cover plus one per page break."""
    return 1 + sum(1 for command in commands if isinstance(command, AddPage))


class LayoutEngine:
    """Main layout engine class."""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or get_config()
        self.margin = self.config.PAGE_MARGIN
        self.currency_prefix = self.config.CURRENCY_PREFIX

    def format_price(self, price: str) -> str:
        return f"Price: {self.currency_prefix}{price}"

    def check_preconditions(self,
                            entries: List[CatalogEntry],
                            company_name: str,
                            logo: Optional[DecodedImage]) -> None:
        """Raise the PreconditionError that blocks generation, if any."""
        if logo is None:
            raise MissingLogoError()
        if not company_name or not company_name.strip():
            raise MissingCompanyNameError()
        if not entries:
            raise NoEntriesError()

    def layout_cover(self,
                     background: RGBColor,
                     company_name: str,
                     logo: DecodedImage,
                     page_size: PageSize) -> List[DrawCommand]:
        """
        Lay out the cover page.

        The logo is drawn as a square half the page wide whose vertical
        centre sits COVER_LOGO_LIFT points above the page centre; the company
        name goes COVER_TITLE_GAP points below the logo's bottom edge.
        """
        w, h = page_size
        logo_size = w * COVER_LOGO_RATIO
        logo_x = (w - logo_size) / 2
        logo_y = (h - logo_size) / 2 - COVER_LOGO_LIFT

        return [
            FillRect(0, 0, w, h, background),
            DrawImage(logo, logo_x, logo_y, logo_size, logo_size),
            DrawText(
                lines=(company_name,),
                x=w / 2,
                y=logo_y + logo_size + COVER_TITLE_GAP,
                font_size=COVER_TITLE_SIZE,
                bold=True,
            ),
        ]

    def layout_page_background(self, background: RGBColor, page_size: PageSize) -> List[DrawCommand]:
        """Start a product page: page break, background fill and grid dividers."""
        w, h = page_size
        margin = self.margin
        return [
            AddPage(),
            FillRect(0, 0, w, h, background),
            DrawLine(w / 2, margin, w / 2, h - margin, DIVIDER_COLOR, DIVIDER_WIDTH),
            DrawLine(margin, h / 2, w - margin, h / 2, DIVIDER_COLOR, DIVIDER_WIDTH),
        ]

    def layout_cell(self,
                    entry: CatalogEntry,
                    cell: CellPosition,
                    wrap_text: TextWrapper) -> List[DrawCommand]:
        """Stack name, image, price and description centred in a cell."""
        image_size = cell.width * CELL_IMAGE_RATIO
        commands: List[DrawCommand] = [
            DrawText(
                lines=(entry.name,),
                x=cell.center_x,
                y=cell.y + NAME_BASELINE,
                font_size=NAME_SIZE,
                bold=True,
            ),
            DrawImage(
                entry.image,
                cell.x + (cell.width - image_size) / 2,
                cell.y + IMAGE_TOP,
                image_size,
                image_size,
            ),
            DrawText(
                lines=(self.format_price(entry.price),),
                x=cell.center_x,
                y=cell.y + image_size + PRICE_OFFSET,
                font_size=PRICE_SIZE,
            ),
        ]

        if entry.has_description:
            lines = wrap_text(entry.description, cell.width - DESCRIPTION_PADDING, DESCRIPTION_SIZE, False)
            commands.append(DrawText(
                lines=tuple(lines),
                x=cell.center_x,
                y=cell.y + image_size + DESCRIPTION_OFFSET,
                font_size=DESCRIPTION_SIZE,
            ))

        return commands

    def layout_catalog(self,
                       entries: List[CatalogEntry],
                       background: RGBColor,
                       company_name: str,
                       logo: Optional[DecodedImage],
                       page_size: PageSize,
                       wrap_text: TextWrapper) -> List[DrawCommand]:
        """
        Produce the full draw command stream for a catalog.

        Raises a PreconditionError before emitting anything if the logo, the
        company name or the entries are missing.
        """
        self.check_preconditions(entries, company_name, logo)

        commands = self.layout_cover(background, company_name, logo, page_size)

        for index, entry in enumerate(entries):
            if index % CELLS_PER_PAGE == 0:
                commands.extend(self.layout_page_background(background, page_size))

            cell = cell_position(index, page_size, self.margin)
            logger.debug(f"Entry {index} '{entry.name}' -> {cell}")
            commands.extend(self.layout_cell(entry, cell, wrap_text))

        logger.info(f"Laid out {len(entries)} entries on {product_page_count(len(entries))} product pages "
                    f"({len(commands)} draw commands)")
        return commands


def create_layout_engine(config: Optional[AppConfig] = None) -> LayoutEngine:
    """Factory function to create a LayoutEngine instance."""
    return LayoutEngine(config)
