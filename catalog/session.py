"""
Catalog session state and the operations that read and write it.

A CatalogSession owns everything one user builds up: the logo and the
background colour derived from it, the company name, the editable product
blocks and the entries of the last successful submission.
"""

import threading
import uuid
from collections import OrderedDict
from typing import Dict, List, Optional

from loguru import logger

from .color import compute_background
from .config import AppConfig, get_config
from .decode import check_upload, decode_all, decode_image
from .errors import ProductValidationError, ValidationError
from .layout import create_layout_engine, count_pages
from .models import (
    CatalogEntry, DecodedImage, ImageUpload, Product, RGBColor,
    LIGHT_BACKGROUND, empty_inputs, flatten_product
)
from .render import create_pdf_sink, render_commands


EDITABLE_FIELDS = ('name', 'price', 'description')


class CatalogSession:
    """State of one catalog being built"""

    def __init__(self, config: Optional[AppConfig] = None, session_id: str = None):
        self.config = config or get_config()
        self.session_id = session_id or str(uuid.uuid4())
        self.logo: Optional[DecodedImage] = None
        self.background: RGBColor = LIGHT_BACKGROUND
        self.company_name: str = ""
        self.inputs: List[Product] = empty_inputs()
        self.entries: List[CatalogEntry] = []

    def _check(self, upload: ImageUpload) -> None:
        check_upload(upload, self.config.MAX_UPLOAD_SIZE, self.config.ALLOWED_EXTENSIONS)

    # Cover inputs

    def set_logo(self, upload: ImageUpload) -> RGBColor:
        """Decode a new logo and recompute the background from it.

        On failure the previous logo and background are kept.
        """
        self._check(upload)
        logo = decode_image(upload)
        background = compute_background(
            logo.raster,
            threshold=self.config.BRIGHTNESS_THRESHOLD,
            grid_size=self.config.SAMPLE_GRID_SIZE,
        )
        self.logo = logo
        self.background = background
        logger.info(f"Session {self.session_id}: logo {upload.filename} set, background {tuple(background)}")
        return background

    def set_company_name(self, name: str) -> None:
        self.company_name = name

    # Product inputs

    def add_product(self) -> int:
        """Append an empty product block and return its index"""
        self.inputs.append(Product())
        return len(self.inputs) - 1

    def _product(self, index: int) -> Product:
        if not 0 <= index < len(self.inputs):
            raise ValidationError(f"No product block at position {index + 1}",
                                  details={'index': index, 'block_count': len(self.inputs)})
        return self.inputs[index]

    def update_product(self, index: int, field: str, value: str) -> None:
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Unknown product field: {field}",
                                  details={'field': field, 'allowed': list(EDITABLE_FIELDS)})
        setattr(self._product(index), field, value)

    def set_product_images(self, index: int, uploads: List[ImageUpload]) -> None:
        self._product(index).images = list(uploads)

    def validate_inputs(self, products: Optional[List[Product]] = None) -> None:
        """Reject the whole submission if any product is incomplete"""
        for index, product in enumerate(self.inputs if products is None else products):
            missing = product.missing_fields()
            if missing:
                logger.warning(f"Session {self.session_id}: product {index + 1} missing {', '.join(missing)}")
                raise ProductValidationError(index, missing)
            for upload in product.images:
                self._check(upload)

    def submit_products(self, products: Optional[List[Product]] = None) -> List[CatalogEntry]:
        """
        Validate, decode and flatten the product blocks.

        ``products`` defaults to the session's own input blocks; the web form
        passes the posted blocks instead.

        All-or-nothing: entries, inputs and background are untouched unless
        every product validates and every image decodes. On success the
        entry list is replaced and the form resets to one empty block.
        """
        if products is None:
            products = self.inputs
        self.validate_inputs(products)

        flat: List[CatalogEntry] = []
        for product in products:
            flat.extend(flatten_product(product, decode_all(product.images)))

        self.entries = flat
        self.inputs = empty_inputs()
        logger.info(f"Session {self.session_id}: submitted {len(flat)} catalog entries")
        return flat

    # Output

    def generate(self, sink=None) -> bytes:
        """Lay out the catalog and render it; returns the finished document bytes"""
        page_size = self.config.page_size
        if sink is None:
            sink = create_pdf_sink(page_size, title=self.company_name.strip() or None,
                                   font_file=self.config.FONT_FILE,
                                   bold_font_file=self.config.BOLD_FONT_FILE)

        engine = create_layout_engine(self.config)
        commands = engine.layout_catalog(
            self.entries,
            self.background,
            self.company_name,
            self.logo,
            page_size,
            sink.wrap_text,
        )
        render_commands(commands, sink)
        data = sink.save()

        logger.info(f"Session {self.session_id}: generated catalog with {count_pages(commands)} pages")
        return data

    def summary(self) -> Dict:
        return {
            'session_id': self.session_id,
            'company_name': self.company_name,
            'has_logo': self.logo is not None,
            'background': list(self.background),
            'input_count': len(self.inputs),
            'entry_count': len(self.entries),
        }


class SessionStore:
    """In-memory registry of catalog sessions keyed by session id.

    Holds at most ``MAX_SESSIONS`` sessions; the least recently used one is
    dropped when a new session would exceed the limit.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or get_config()
        self.max_sessions = max(1, self.config.MAX_SESSIONS)
        self._sessions: "OrderedDict[str, CatalogSession]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: Optional[str]) -> CatalogSession:
        """Return the session for ``session_id``, creating it if needed"""
        with self._lock:
            if session_id and session_id in self._sessions:
                self._sessions.move_to_end(session_id)
                return self._sessions[session_id]

            catalog_session = CatalogSession(self.config, session_id)
            self._sessions[catalog_session.session_id] = catalog_session
            logger.debug(f"Created catalog session {catalog_session.session_id}")

            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted idle catalog session {evicted_id}")
            return catalog_session

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
