from flask import Response, current_app, jsonify, redirect, request, stream_with_context
from flask_login import current_user

from alfitra import db
from alfitra.materials import materials_bp, storage
from alfitra.materials.models import ReferenceMaterial, MATERIAL_PDF
from alfitra.modules.models import Module
from alfitra.common.decorators import admin_required, get_json_body, login_required
from alfitra.common.errors import ValidationError
from alfitra.common.lookups import get_or_404
from alfitra.security import SecurityLogger


def _material_dict(material: ReferenceMaterial) -> dict:
    url = material.url
    if storage.is_store_url(url):
        url = storage.normalize_pdf_url(url)
    return material.to_dict(url=url)


def _newest_first(query):
    return query.order_by(ReferenceMaterial.created_at.desc(), ReferenceMaterial.id.desc())


@materials_bp.route('/admin/upload-reference', methods=['POST'])
@admin_required
def upload_reference():
    """Upload a reference PDF for a question; the caller stores the returned URL."""
    uploaded = storage.upload_pdf(request.files.get('file'))
    return jsonify({'success': True, **uploaded}), 200


@materials_bp.route('/admin/modules/<int:module_id>/materials', methods=['POST'])
@admin_required
def upload_material(module_id):
    """
    Attach a reference PDF to a module.

    Multipart form with ``file`` plus ``title`` and ``description``, or a JSON
    body with ``title``, ``description`` and a ``url`` ending in ``.pdf``.
    """
    if request.files or request.form:
        data = request.form.to_dict()
    else:
        data = get_json_body()

    title = data.get('title')
    if not isinstance(title, str) or not title.strip():
        raise ValidationError('Title is required')

    module = get_or_404(Module, module_id, 'Module')

    description = data.get('description') or ''
    if not isinstance(description, str):
        raise ValidationError('Description must be text')

    file = request.files.get('file')
    url = data.get('url')
    public_id = None
    original_filename = None

    if file is not None and file.filename:
        uploaded = storage.upload_pdf(file)
        url = uploaded['url']
        public_id = uploaded['public_id']
        original_filename = uploaded['original_filename']
    elif not url or not isinstance(url, str):
        raise ValidationError('Please provide a PDF file or a PDF URL')
    elif not url.strip().lower().endswith('.pdf'):
        raise ValidationError('Only PDF URLs are allowed')
    else:
        url = url.strip()

    material = ReferenceMaterial(
        module_id=module.id,
        title=storage.ensure_pdf_title(title.strip()),
        type=MATERIAL_PDF,
        url=storage.normalize_pdf_url(url),
        storage_public_id=public_id,
        original_filename=original_filename,
        description=description.strip(),
        uploaded_by=current_user.id,
    )
    db.session.add(material)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        if public_id:
            # Don't leave an unreferenced file behind
            storage.destroy_quietly(public_id)
        raise

    current_app.logger.info(f"Material {material.id} '{material.title}' added to module {module.id}")
    return jsonify({'success': True, 'material': _material_dict(material)}), 201


@materials_bp.route('/modules/<int:module_id>/materials', methods=['GET'])
@login_required
def list_module_materials(module_id):
    materials = _newest_first(ReferenceMaterial.query.filter_by(module_id=module_id)).all()
    return jsonify({'success': True, 'materials': [_material_dict(m) for m in materials]}), 200


@materials_bp.route('/modules/materials', methods=['GET'])
@login_required
def list_recent_materials():
    """Latest materials across all modules, for the participant home page."""
    materials = _newest_first(ReferenceMaterial.query).limit(50).all()
    return jsonify({'success': True, 'materials': [_material_dict(m) for m in materials]}), 200


@materials_bp.route('/modules/materials/<int:material_id>/download', methods=['GET'])
@login_required
def download_material(material_id):
    """
    Download a material as an attachment.

    Files on the object store are fetched and re-streamed under a clean
    filename; any other URL is a plain redirect.
    """
    material = get_or_404(ReferenceMaterial, material_id, 'Material')

    if not storage.is_store_url(material.url):
        SecurityLogger.log_file_access(material.id, current_user.id, proxied=False)
        return redirect(material.url)

    filename = storage.download_filename(material.original_filename, material.title)
    upstream = storage.open_remote(storage.normalize_pdf_url(material.url))

    headers = {'Content-Disposition': f'attachment; filename="{filename}"'}
    if upstream.headers.get('Content-Length'):
        headers['Content-Length'] = upstream.headers['Content-Length']

    SecurityLogger.log_file_access(material.id, current_user.id, proxied=True)
    return Response(
        stream_with_context(storage.iter_remote(upstream)),
        200,
        headers,
        mimetype=storage.PDF_MIMETYPE,
    )


@materials_bp.route('/admin/materials/<int:material_id>', methods=['DELETE'])
@admin_required
def delete_material(material_id):
    """Remove the stored file (best effort), then the record."""
    material = get_or_404(ReferenceMaterial, material_id, 'Material')

    if material.storage_public_id:
        storage.destroy_quietly(material.storage_public_id)

    db.session.delete(material)
    db.session.commit()

    current_app.logger.info(f"Material {material_id} deleted")
    return jsonify({'success': True, 'message': 'Material deleted successfully'}), 200
