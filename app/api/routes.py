"""
Flask API for Pothole Detection

Provides REST endpoints for uploading road photos, checking whether they
show enough road surface, and running pothole detection.
"""

import base64
import logging

import cv2
import numpy as np
from flask import request, jsonify, current_app
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from . import api
from ..core import (
    DetectorError,
    ImageDecodeError,
    PixelBuffer,
    analyze,
    detect,
    suggest_report,
    validate,
)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Multipart field names accepted for a single image upload
UPLOAD_FIELDS = ('file', 'image')


def allowed_file(filename):
    allowed = current_app.config['ALLOWED_EXTENSIONS']
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def decode_image_bytes(data: bytes) -> np.ndarray:
    """Decode encoded image bytes to a BGR numpy image."""
    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None
    if image is None:
        raise ImageDecodeError("Failed to decode image")
    return image


def decode_image_base64(base64_str: str) -> np.ndarray:
    """Decode base64 string to numpy image."""
    try:
        img_data = base64.b64decode(base64_str, validate=True)
    except (ValueError, TypeError) as e:
        raise ImageDecodeError(f"Invalid base64 image: {e}")
    return decode_image_bytes(img_data)


def read_request_image() -> PixelBuffer:
    """
    Read the image of a single-image request.

    Accepts a multipart upload under 'file' or 'image', or JSON {"image": <base64>}.

    Raises:
        ImageDecodeError: If no usable image was sent
    """
    field = next((name for name in UPLOAD_FIELDS if name in request.files), None)

    if field is not None:
        file = request.files[field]
        if file.filename == '':
            raise ImageDecodeError("No file selected")
        if not allowed_file(file.filename):
            raise ImageDecodeError("Invalid file type")
        image = decode_image_bytes(file.read())

    elif request.is_json and 'image' in (request.get_json(silent=True) or {}):
        image = decode_image_base64(request.get_json()['image'])

    else:
        raise ImageDecodeError("No image provided")

    return PixelBuffer.from_image(image)


@api.errorhandler(DetectorError)
def handle_detector_error(error):
    return jsonify({"error": str(error)}), 400


@api.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unhandled error during image analysis")
    return jsonify({"error": "Image analysis failed"}), 500


@api.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": API_VERSION})


@api.route('/validate', methods=['POST'])
def validate_image():
    """Check whether an image shows enough road surface."""
    buffer = read_request_image()
    result = validate(buffer)
    return jsonify({"status": "success", "result": result.to_dict()})


@api.route('/detect', methods=['POST'])
def detect_pothole():
    """Run pothole detection on an image."""
    buffer = read_request_image()
    result = detect(buffer)

    logger.info(
        f"Detection: pothole={result.is_pothole}, confidence={result.confidence:.2f}, "
        f"type={result.image_type}"
    )

    return jsonify({
        "status": "success",
        "result": result.to_dict(),
        "suggestion": suggest_report(result),
    })


@api.route('/analyze-image', methods=['POST'])
def analyze_image():
    """Validate an image and, if it shows a road, run pothole detection."""
    buffer = read_request_image()
    result = analyze(buffer)

    return jsonify({
        "status": "success",
        "result": result.to_dict(),
        "suggestion": suggest_report(result),
    })


@api.route('/batch', methods=['POST'])
def batch_detect():
    """Run detection on multiple images."""
    if 'files' not in request.files:
        return jsonify({"error": "No files provided"}), 400

    files = request.files.getlist('files')
    results = []

    for file in files:
        filename = secure_filename(file.filename or "")
        if not allowed_file(file.filename or ""):
            results.append({"filename": filename, "error": "Invalid file type"})
            continue

        try:
            buffer = PixelBuffer.from_image(decode_image_bytes(file.read()))
            result = detect(buffer)
            results.append({
                "filename": filename,
                "result": result.to_dict(),
                "suggestion": suggest_report(result),
            })
        except DetectorError as e:
            logger.warning(f"Skipping {filename}: {e}")
            results.append({"filename": filename, "error": str(e)})

    return jsonify({
        "status": "success",
        "count": len(results),
        "results": results,
    })
