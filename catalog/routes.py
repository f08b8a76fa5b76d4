"""
Flask routes for the Product Catalog Builder
Handles logo upload, product submission and catalog download
"""

import io
import re
import uuid
from typing import Dict, List
from flask import Blueprint, current_app, jsonify, request, send_file, session
from werkzeug.datastructures import FileStorage
from loguru import logger

from .errors import CatalogError, ValidationError, create_error_recovery_suggestions
from .models import ImageUpload, Product
from .session import CatalogSession


bp = Blueprint('main', __name__)

PRODUCT_FIELD = re.compile(r'^products-(\d+)-(name|price|description|images)$')


def current_catalog() -> CatalogSession:
    """Catalog session bound to the browser session cookie"""
    store = current_app.extensions['catalog_sessions']
    catalog_session = store.get(session.get('catalog_id'))
    session['catalog_id'] = catalog_session.session_id
    return catalog_session


def to_upload(file: FileStorage) -> ImageUpload:
    return ImageUpload(filename=file.filename or f"upload_{uuid.uuid4().hex[:8]}", data=file.read())


def parse_product_form(form, files) -> List[Product]:
    """Build product blocks from ``products-<i>-<field>`` form keys, ordered by index"""
    blocks: Dict[int, Product] = {}

    for key in form.keys():
        match = PRODUCT_FIELD.match(key)
        if match and match.group(2) != 'images':
            index = int(match.group(1))
            setattr(blocks.setdefault(index, Product()), match.group(2), form.get(key, ''))

    for key in files.keys():
        match = PRODUCT_FIELD.match(key)
        if match and match.group(2) == 'images':
            index = int(match.group(1))
            uploads = [to_upload(f) for f in files.getlist(key) if f and f.filename]
            blocks.setdefault(index, Product()).images = uploads

    return [blocks[index] for index in sorted(blocks)]


def error_response(e: CatalogError, catalog_session: CatalogSession, status: int = 400):
    context = {
        'entry_count': len(catalog_session.entries),
        'has_logo': catalog_session.logo is not None,
    }
    payload = e.to_dict()
    payload['suggestions'] = create_error_recovery_suggestions(e, context)
    return jsonify(payload), status


@bp.route('/', methods=['GET'])
def index():
    """Current state of the caller's catalog"""
    return jsonify(current_catalog().summary())


@bp.route('/logo', methods=['POST'])
def upload_logo():
    """Upload a company logo and compute the page background from it"""
    catalog_session = current_catalog()
    try:
        file = request.files.get('logo')
        if file is None or not file.filename:
            raise ValidationError("No logo file selected")

        background = catalog_session.set_logo(to_upload(file))
        return jsonify({'background': list(background), **catalog_session.summary()})

    except CatalogError as e:
        logger.warning(f"Logo rejected in session {catalog_session.session_id}: {e}")
        return error_response(e, catalog_session)


@bp.route('/company', methods=['POST'])
def set_company():
    catalog_session = current_catalog()
    catalog_session.set_company_name(request.form.get('company_name', ''))
    return jsonify(catalog_session.summary())


@bp.route('/products/block', methods=['POST'])
def add_product_block():
    """Append an empty product block to the input form"""
    catalog_session = current_catalog()
    index = catalog_session.add_product()
    return jsonify({'index': index, **catalog_session.summary()})


@bp.route('/products', methods=['POST'])
def submit_products():
    """Submit the posted product blocks"""
    catalog_session = current_catalog()
    try:
        products = parse_product_form(request.form, request.files)
        if not products:
            raise ValidationError("No product blocks submitted")

        entries = catalog_session.submit_products(products)

        return jsonify({
            'message': "Products added successfully!",
            'entries': [{'name': entry.name, 'price': entry.price, 'image': entry.image.filename}
                        for entry in entries],
            **catalog_session.summary()
        })

    except CatalogError as e:
        logger.warning(f"Product submission rejected in session {catalog_session.session_id}: {e}")
        return error_response(e, catalog_session)


@bp.route('/catalog.pdf', methods=['GET'])
def download_catalog():
    """Generate the catalog and send it as a download"""
    catalog_session = current_catalog()
    try:
        data = catalog_session.generate()
    except CatalogError as e:
        logger.warning(f"Catalog generation failed in session {catalog_session.session_id}: {e}")
        return error_response(e, catalog_session)

    return send_file(
        io.BytesIO(data),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=catalog_session.config.OUTPUT_FILENAME,
    )
