#!/usr/bin/env python3
"""
Color Highlight Assist API Server
Accepts camera frames over HTTP, returns the highlighted composite and the
center color, and exposes the selection controls the UI needs.
"""

import os
import logging
import base64
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, Response
from flask_cors import CORS

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

# Import services and models
from models.color_category import CATALOG, TrackedColor
from models.frame_errors import FrameError
from models.frame_result import FrameResult
from models.vision_mode import VisionMode
from repositories.frame_slot_repository import FrameSlotRepository
from repositories.pixel_buffer_repository import PixelBufferRepository
from services.frame_processor_service import FrameProcessorService
from services.selection_service import SelectionService

logger = logging.getLogger(__name__)

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20")) * 1024 * 1024
PNG_COMPRESSION = int(os.getenv("PNG_COMPRESSION", "1"))


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def json_object() -> dict:
    """Request JSON body as a dict; anything else (array, string, missing) is empty."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return data


def result_to_json(result: FrameResult, buffer_repository: PixelBufferRepository) -> dict:
    """Convert a FrameResult into the JSON payload sent to the frontend."""
    png = buffer_repository.encode_png(result.composited, compress_level=PNG_COMPRESSION)
    color = result.center_color
    return {
        'image': f"data:image/png;base64,{base64.b64encode(png).decode('utf-8')}",
        'width': result.composited.width,
        'height': result.composited.height,
        'center_color': {
            'rgb': [round(c, 4) for c in color.as_tuple()],
            'rgb_string': color.rgb_string(),
            'hex': color.hex(),
        },
        'active_categories': [c.value for c in result.active_categories],
    }


def create_app(frame_processor: FrameProcessorService | None = None) -> Flask:
    """Build the Flask app; services are injectable for tests."""
    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend communication
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

    selection_service = frame_processor.selection_service if frame_processor else SelectionService()
    frame_processor = frame_processor or FrameProcessorService(selection_service=selection_service)
    buffer_repository = PixelBufferRepository()
    frame_slot = FrameSlotRepository()

    @app.route('/api/process-frame', methods=['POST'])
    def process_frame():
        """Highlight one uploaded frame with the current selection."""
        if 'frame' not in request.files:
            return jsonify({'success': False, 'message': 'No frame provided'}), 400

        file = request.files['frame']
        if file.filename and not allowed_file(file.filename):
            return jsonify({'success': False, 'message': 'Unsupported file type'}), 400

        try:
            buffer = buffer_repository.decode(file.read())
        except FrameError as e:
            logger.warning(f"Frame decode error: {e}")
            return jsonify({'success': False, 'message': str(e)}), 400

        result = frame_processor.process_frame(buffer)
        if result is None:
            return jsonify({'success': False, 'message': 'Frame skipped'}), 400

        frame_id = frame_slot.store(result)
        payload = result_to_json(result, buffer_repository)
        payload.update({'success': True, 'frame_id': frame_id})
        return jsonify(payload)

    @app.route('/api/frame/latest', methods=['GET'])
    def latest_frame():
        """Serve the most recent composited frame as PNG."""
        result = frame_slot.retrieve()
        if result is None:
            return jsonify({'error': 'No frame processed yet'}), 404
        png = buffer_repository.encode_png(result.composited, compress_level=PNG_COMPRESSION)
        return Response(png, mimetype='image/png', headers={'Cache-Control': 'no-cache'})

    @app.route('/api/toggle-color', methods=['POST'])
    def toggle_color():
        data = json_object()
        try:
            state = selection_service.toggle_manual_color(data.get('color'))
        except ValueError:
            return jsonify({'success': False, 'message': f"Unknown color: {data.get('color')}"}), 400
        return jsonify({'success': True, 'state': state.to_dict()})

    @app.route('/api/vision-mode', methods=['POST'])
    def vision_mode():
        data = json_object()
        try:
            state = selection_service.select_vision_mode(data.get('mode'))
        except ValueError:
            return jsonify({'success': False, 'message': f"Unknown vision mode: {data.get('mode')}"}), 400
        return jsonify({'success': True, 'state': state.to_dict()})

    @app.route('/api/manual-colors', methods=['POST'])
    def manual_colors():
        state = selection_service.use_manual_colors()
        return jsonify({'success': True, 'state': state.to_dict()})

    @app.route('/api/grayscale', methods=['POST'])
    def grayscale():
        data = json_object()
        if not isinstance(data.get('enabled'), bool):
            return jsonify({'success': False, 'message': "'enabled' must be a boolean"}), 400
        state = selection_service.set_grayscale_background(data['enabled'])
        return jsonify({'success': True, 'state': state.to_dict()})

    @app.route('/api/state', methods=['GET'])
    def state():
        return jsonify(selection_service.snapshot().to_dict())

    @app.route('/api/reset', methods=['POST'])
    def reset():
        state = selection_service.reset()
        frame_slot.clear()
        return jsonify({'success': True, 'state': state.to_dict()})

    @app.route('/api/catalog', methods=['GET'])
    def catalog():
        """Tracked colors and vision modes, for building the UI controls."""
        return jsonify({
            'colors': [
                {
                    'id': color.value,
                    'name': color.display_name,
                    'target_rgb': list(color.target_rgb),
                    'hue_range': [CATALOG[color].hue_min, CATALOG[color].hue_max],
                    'min_saturation': CATALOG[color].min_saturation,
                    'min_value': CATALOG[color].min_value,
                }
                for color in TrackedColor
            ],
            'vision_modes': [
                {
                    'id': mode.value,
                    'symbol': mode.symbol,
                    'title': mode.title,
                    'description': mode.description,
                    'highlights': [c.value for c in mode.highlighted_colors],
                }
                for mode in VisionMode
            ],
        })

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'message': 'Color Highlight Assist API is running',
            'frames_processed': frame_processor.frames_processed,
            'frames_skipped': frame_processor.frames_skipped,
        })

    @app.errorhandler(413)
    def too_large(e):
        """Handle file too large error."""
        return jsonify({'error': f'Frame too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413

    @app.errorhandler(400)
    def bad_request(e):
        """Handle bad request error."""
        return jsonify({'error': 'Bad request'}), 400

    @app.errorhandler(500)
    def internal_error(e):
        """Handle internal server error."""
        logger.error(f"Internal server error: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


def main():
    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "5000"))
    logger.info(f"Starting Color Highlight Assist API on {host}:{port}")
    logger.info(f"Max upload size: {MAX_CONTENT_LENGTH // (1024 * 1024)}MB")
    create_app().run(host=host, port=port, threaded=True)


if __name__ == '__main__':
    main()
