#!/usr/bin/env python3
"""
Step Detection API Server

REST API for step detection on accelerometer streams.

Endpoints:
- POST /api/v1/detect - Detect steps in a JSON batch of samples
- POST /api/v1/analyze - Detect steps in an uploaded CSV recording
- POST /api/v1/sessions - Start a step tracking session
- GET /api/v1/sessions/<session_id> - Session totals and activity log
- POST /api/v1/sessions/<session_id>/samples - Feed samples to a session
- POST /api/v1/sessions/<session_id>/manual-step - Add a manual step
- PUT /api/v1/sessions/<session_id>/goal - Set the daily goal
- DELETE /api/v1/sessions/<session_id> - End a session
- GET /api/v1/health - Health check

Usage:
    python api/server.py
    # or
    flask --app api.server run --port 5003
"""

import os
import sys
import threading
import time
import uuid
from typing import Any, Dict, List, Tuple

from flask import Flask, request, jsonify, redirect, url_for
from flask_cors import CORS

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from stepsync import __version__
from stepsync.config import ClassifierConfig, InvalidConfig, TrackerConfig
from stepsync.detectors import InvalidSample, Sample, StepClassifier
from stepsync.tracker import StepTracker
from stepsync.utils.recording import parse_recording

load_dotenv()


app = Flask(__name__)
CORS(app)

# Configuration
ALLOWED_EXTENSIONS = {'csv'}
MAX_SAMPLES_PER_REQUEST = 100_000
SIGNATURES_IN_RESPONSE = 10
MAX_SESSIONS = 1000
SESSION_TTL_S = 24 * 60 * 60  # idle sessions expire after a day

app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max


class TrackingSession:
    """A tracker plus the lock serializing access to it."""

    def __init__(self, tracker: StepTracker):
        self.tracker = tracker
        self.lock = threading.Lock()
        self.last_used = time.monotonic()


_sessions: Dict[str, TrackingSession] = {}
_sessions_lock = threading.Lock()


def allowed_file(filename: str) -> bool:
    """Check if file has allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def error_response(message: str, status: int = 400) -> Tuple[Any, int]:
    return jsonify({'error': message}), status


def get_json_body() -> Dict[str, Any]:
    """Return the JSON object body, or raise InvalidSample if there is none."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise InvalidSample('Request body must be a JSON object')
    return body


def parse_samples(raw: Any) -> List[Sample]:
    if not isinstance(raw, list):
        raise InvalidSample("'samples' must be a list")
    if len(raw) > MAX_SAMPLES_PER_REQUEST:
        raise InvalidSample(f'At most {MAX_SAMPLES_PER_REQUEST} samples per request')
    return [Sample.from_dict(item) for item in raw]


def run_detection(samples, config: ClassifierConfig) -> Dict[str, Any]:
    """Run a fresh classifier over the samples and build the response."""
    classifier = StepClassifier(config)
    events = []
    n_samples = 0
    for sample in samples:
        n_samples += 1
        event = classifier.process(sample)
        if event is not None:
            events.append(event)

    return {
        'steps': len(events),
        'n_samples': n_samples,
        'events': [e.to_dict() for e in events],
        'signatures': [s.to_dict() for s in classifier.signature_history[-SIGNATURES_IN_RESPONSE:]],
        'config': classifier.config.to_dict(),
    }


def get_session(session_id: str) -> TrackingSession:
    with _sessions_lock:
        session = _sessions.get(session_id)
        if session is not None:
            session.last_used = time.monotonic()
        return session


def evict_sessions(now: float) -> List[str]:
    """
    Drop idle sessions, then the least recently used ones until there is
    room for one more. Caller must hold _sessions_lock.
    """
    evicted = [sid for sid, s in _sessions.items() if now - s.last_used > SESSION_TTL_S]
    for sid in evicted:
        del _sessions[sid]

    if len(_sessions) >= MAX_SESSIONS:
        by_age = sorted(_sessions, key=lambda sid: _sessions[sid].last_used)
        for sid in by_age[:len(_sessions) - MAX_SESSIONS + 1]:
            del _sessions[sid]
            evicted.append(sid)
    return evicted


@app.errorhandler(ValueError)
def handle_value_error(e: ValueError):
    """Bad configs and samples are client errors."""
    app.logger.warning('Rejected request to %s: %s', request.path, e)
    return error_response(str(e), 400)


@app.route('/')
def index():
    """Redirect to API documentation."""
    return redirect(url_for('api_docs'))


@app.route('/api/docs')
def api_docs():
    """API documentation page."""
    return jsonify({
        'name': 'Step Detection API',
        'version': __version__,
        'endpoints': {
            'POST /api/v1/detect': 'Detect steps in a JSON batch of samples',
            'POST /api/v1/analyze': 'Detect steps in an uploaded CSV recording',
            'POST /api/v1/sessions': 'Start a step tracking session',
            'GET /api/v1/sessions/<session_id>': 'Session totals and activity log',
            'POST /api/v1/sessions/<session_id>/samples': 'Feed samples to a session',
            'POST /api/v1/sessions/<session_id>/manual-step': 'Add a manual step',
            'PUT /api/v1/sessions/<session_id>/goal': 'Set the daily goal',
            'DELETE /api/v1/sessions/<session_id>': 'End a session',
            'GET /api/v1/health': 'Health check',
        }
    })


@app.route('/api/v1/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    with _sessions_lock:
        n_sessions = len(_sessions)
    return jsonify({
        'status': 'healthy',
        'version': __version__,
        'sessions': n_sessions,
    })


@app.route('/api/v1/detect', methods=['POST'])
def detect():
    """
    Detect steps in a batch of samples.

    Request:
        {
            "samples": [{"x": float, "y": float, "z": float, "timestamp": ms}, ...],
            "config": {...}  (optional classifier overrides)
        }

    Response:
        {
            "steps": int,
            "n_samples": int,
            "events": [{"timestamp", "confidence", "accepted"}],
            "signatures": [...last signatures...],
            "config": {...}
        }
    """
    body = get_json_body()
    config = ClassifierConfig.from_dict(body.get('config'))
    samples = parse_samples(body.get('samples', []))
    return jsonify(run_detection(samples, config))


@app.route('/api/v1/analyze', methods=['POST'])
def analyze():
    """
    Detect steps in an uploaded CSV recording.

    Request:
        - file: CSV with timestamp_ms,x,y,z header (multipart/form-data)
        - cooldown_ms, confidence_threshold, movement_threshold,
          vertical_threshold (optional query params)
    """
    if 'file' not in request.files:
        return error_response('No file uploaded')

    file = request.files['file']
    if file.filename == '':
        return error_response('No file selected')

    if not allowed_file(file.filename):
        return error_response('Invalid file type. Please upload a .csv file')

    overrides = {}
    for key in ('cooldown_ms', 'confidence_threshold', 'movement_threshold', 'vertical_threshold'):
        if key in request.args:
            try:
                overrides[key] = float(request.args[key])
            except ValueError:
                raise InvalidConfig(f'{key} must be a number')
    config = ClassifierConfig.from_dict(overrides)

    try:
        text = file.read().decode('utf-8')
    except UnicodeDecodeError:
        return error_response('File is not valid UTF-8 text')

    recording = parse_recording(text, source=file.filename)
    response = run_detection(recording.samples(), config)
    response['duration_ms'] = recording.duration_ms
    response['sample_rate_hz'] = round(recording.sample_rate_hz, 2)
    return jsonify(response)


@app.route('/api/v1/sessions', methods=['POST'])
def create_session():
    """
    Start a tracking session.

    Request:
        {"config": {...}, "daily_goal": int}  (both optional)
    """
    body = get_json_body()
    config = ClassifierConfig.from_dict(body.get('config'))
    tracker_config = TrackerConfig(daily_goal=body.get('daily_goal', TrackerConfig.daily_goal))
    tracker = StepTracker(config, tracker_config)

    session_id = uuid.uuid4().hex
    with _sessions_lock:
        evicted = evict_sessions(time.monotonic())
        _sessions[session_id] = TrackingSession(tracker)

    for sid in evicted:
        app.logger.info('Evicted session %s', sid)
    app.logger.info('Started session %s', session_id)
    return jsonify({'session_id': session_id, **tracker.summary()}), 201


@app.route('/api/v1/sessions/<session_id>', methods=['GET'])
def session_summary(session_id: str):
    session = get_session(session_id)
    if session is None:
        return error_response(f'Session not found: {session_id}', 404)

    with session.lock:
        return jsonify({'session_id': session_id, **session.tracker.summary()})


@app.route('/api/v1/sessions/<session_id>/samples', methods=['POST'])
def session_samples(session_id: str):
    """
    Feed samples to a session, in order.

    Request:
        {"samples": [{"x", "y", "z", "timestamp"}, ...]}
    """
    session = get_session(session_id)
    if session is None:
        return error_response(f'Session not found: {session_id}', 404)

    samples = parse_samples(get_json_body().get('samples', []))
    with session.lock:
        events = session.tracker.process_many(samples)
        summary = session.tracker.summary()

    return jsonify({
        'session_id': session_id,
        'events': [e.to_dict() for e in events],
        **summary,
    })


@app.route('/api/v1/sessions/<session_id>/manual-step', methods=['POST'])
def session_manual_step(session_id: str):
    """
    Add a manually entered step.

    Request:
        {"timestamp": ms}
    """
    session = get_session(session_id)
    if session is None:
        return error_response(f'Session not found: {session_id}', 404)

    timestamp = get_json_body().get('timestamp')
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return error_response("'timestamp' must be a number")

    with session.lock:
        session.tracker.add_manual_step(float(timestamp))
        summary = session.tracker.summary()

    return jsonify({'session_id': session_id, **summary})


@app.route('/api/v1/sessions/<session_id>/goal', methods=['PUT'])
def session_goal(session_id: str):
    """
    Set the daily goal.

    Request:
        {"daily_goal": int}
    """
    session = get_session(session_id)
    if session is None:
        return error_response(f'Session not found: {session_id}', 404)

    goal = get_json_body().get('daily_goal')
    with session.lock:
        session.tracker.set_daily_goal(goal)
        summary = session.tracker.summary()

    return jsonify({'session_id': session_id, **summary})


@app.route('/api/v1/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id: str):
    with _sessions_lock:
        session = _sessions.pop(session_id, None)
    if session is None:
        return error_response(f'Session not found: {session_id}', 404)

    app.logger.info('Ended session %s', session_id)
    with session.lock:
        return jsonify({'session_id': session_id, **session.tracker.summary()})


if __name__ == '__main__':
    host = os.environ.get('STEPSYNC_HOST', '0.0.0.0')
    port = int(os.environ.get('STEPSYNC_PORT', '5003'))
    debug = os.environ.get('STEPSYNC_DEBUG', '0').lower() in ('1', 'true', 'yes')

    print('=' * 50)
    print(f'Step Detection API Server v{__version__}')
    print('=' * 50)
    print('Endpoints:')
    print('  - POST   /api/v1/detect')
    print('  - POST   /api/v1/analyze')
    print('  - POST   /api/v1/sessions')
    print('  - GET    /api/v1/sessions/<session_id>')
    print('  - POST   /api/v1/sessions/<session_id>/samples')
    print('  - POST   /api/v1/sessions/<session_id>/manual-step')
    print('  - PUT    /api/v1/sessions/<session_id>/goal')
    print('  - DELETE /api/v1/sessions/<session_id>')
    print('=' * 50)
    print(f'Starting server at http://localhost:{port}')
    app.run(debug=debug, host=host, port=port)
