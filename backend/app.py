"""
Stealth Address Web Service - Flask Backend

Expose các thao tác của stealth core qua JSON API.
Không có ledger I/O: caller tự lấy transactions và publish ephemeral keys.
"""

import logging
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS

from Stealth.Stealth_Address import (
    get_meta_address, format_meta_address, parse_meta_address, generate_stealth_address,
    is_stealth_address_for_us, derive_stealth_spending_key,
)
from Stealth.Stealth_Config import load_settings
from Stealth.Stealth_Encoding import encode_base58, as_key_bytes
from Stealth.Stealth_Errors import StealthError, InvalidFormat
from Stealth.Stealth_KeyGen import (
    generate_stealth_keys, derive_stealth_keys_from_seed, derive_stealth_keys_from_signer,
)
from Stealth.Stealth_Scanner import ScanCandidate, ScanStats, scan_candidates, extract_ephemeral_key
from Stealth.Stealth_Serialization import serialize_stealth_keys

settings = load_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

app.config['SCAN_WORKERS'] = settings.scan_workers


# ============== Utility Functions ==============

def error_response(error, status=400):
    """Response lỗi thống nhất; không bao giờ chứa key material"""
    return jsonify({
        'status': 'error',
        'error': getattr(error, 'kind', type(error).__name__),
        'message': str(error),
    }), status


def get_payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidFormat("Request body must be a JSON object")
    return data


def require(data, field):
    value = data.get(field)
    if value is None or value == '':
        raise InvalidFormat(f"Missing field: {field}")
    return value


def parse_hex(value, field):
    try:
        return bytes.fromhex(value)
    except (TypeError, ValueError):
        raise InvalidFormat(f"Field {field} must be hex") from None


def keys_response(keys):
    meta = get_meta_address(keys)
    return jsonify({
        'status': 'success',
        'keys': serialize_stealth_keys(keys).to_dict(),
        'meta_address': format_meta_address(meta),
        'timestamp': datetime.now().isoformat(),
    }), 200


# ============== 1. Key API ==============

@app.route('/api/keys/generate', methods=['POST'])
def keys_generate():
    """
    Generate stealth keys ngẫu nhiên
    Output: {keys: {viewPrivateKey, ...}, meta_address}
    """
    keys = generate_stealth_keys()
    try:
        return keys_response(keys)
    finally:
        keys.wipe()


@app.route('/api/keys/derive', methods=['POST'])
def keys_derive():
    """
    Derive stealth keys deterministically
    Input: {seed_hex} hoặc {signature_hex} (seed = SHA-256(signature))
    """
    try:
        data = get_payload()
        if data.get('signature_hex'):
            signature = parse_hex(data['signature_hex'], 'signature_hex')
            if not signature:
                raise InvalidFormat("Field signature_hex must not be empty")
            keys = derive_stealth_keys_from_signer(lambda message: signature)
        else:
            keys = derive_stealth_keys_from_seed(parse_hex(require(data, 'seed_hex'), 'seed_hex'))
    except StealthError as e:
        return error_response(e)

    try:
        return keys_response(keys)
    finally:
        keys.wipe()


# ============== 2. Meta-address API ==============

@app.route('/api/meta-address/parse', methods=['POST'])
def meta_address_parse():
    """
    Input: {meta_address}
    Output: {view_pub_key, spend_pub_key}
    """
    try:
        data = get_payload()
        meta = parse_meta_address(require(data, 'meta_address'))
        meta.view_public_key_bytes()
        meta.spend_public_key_bytes()
    except StealthError as e:
        return error_response(e)

    return jsonify({
        'status': 'success',
        'view_pub_key': meta.view_pub_key,
        'spend_pub_key': meta.spend_pub_key,
    }), 200


# ============== 3. Stealth API ==============

@app.route('/api/stealth/generate', methods=['POST'])
def stealth_generate():
    """
    Sender: sinh stealth address
    Input: {meta_address, output_index?}
    Output: {stealth_address, ephemeral_pub_key}
    """
    try:
        data = get_payload()
        result = generate_stealth_address(require(data, 'meta_address'), data.get('output_index', 0))
    except StealthError as e:
        return error_response(e)

    return jsonify({
        'status': 'success',
        'stealth_address': result.address,
        'ephemeral_pub_key': result.ephemeral_pub_key,
        'output_index': result.output_index,
        'timestamp': datetime.now().isoformat(),
    }), 200


@app.route('/api/stealth/scan', methods=['POST'])
def stealth_scan():
    """
    Receiver: kiểm tra một candidate
    Input: {stealth_address, ephemeral_pub_key, view_private_key, spend_public_key, output_index?}
    Output: {is_ours}
    """
    try:
        data = get_payload()
        is_ours = is_stealth_address_for_us(
            require(data, 'stealth_address'),
            require(data, 'ephemeral_pub_key'),
            as_key_bytes(require(data, 'view_private_key')),
            as_key_bytes(require(data, 'spend_public_key')),
            data.get('output_index', 0),
        )
    except StealthError as e:
        return error_response(e)

    return jsonify({'status': 'success', 'is_ours': is_ours}), 200


@app.route('/api/stealth/scan/batch', methods=['POST'])
def stealth_scan_batch():
    """
    Receiver: scan nhiều candidates
    Input: {candidates: [{tx_id, stealth_address, ephemeral_pub_key | memo, output_index?}],
            view_private_key, spend_public_key, max_workers?}
    Output: {owned: [tx_id...], stats}
    """
    try:
        data = get_payload()
        raw_candidates = require(data, 'candidates')
        if not isinstance(raw_candidates, list):
            raise InvalidFormat("Field candidates must be a list")

        view_private_key = as_key_bytes(require(data, 'view_private_key'))
        spend_public_key = as_key_bytes(require(data, 'spend_public_key'))

        candidates = []
        for item in raw_candidates:
            if not isinstance(item, dict):
                raise InvalidFormat("Each candidate must be an object")
            ephemeral_pub_key = item.get('ephemeral_pub_key') or extract_ephemeral_key(item.get('memo'))
            if ephemeral_pub_key is None:
                continue
            candidates.append(ScanCandidate(
                item.get('stealth_address'),
                ephemeral_pub_key,
                tx_id=item.get('tx_id'),
                output_index=item.get('output_index', 0),
            ))

        max_workers = data.get('max_workers', app.config['SCAN_WORKERS'])
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise InvalidFormat("Field max_workers must be a positive integer")

        stats = ScanStats()
        owned = scan_candidates(candidates, view_private_key, spend_public_key,
                                max_workers=max_workers, stats=stats)
    except StealthError as e:
        return error_response(e)

    return jsonify({
        'status': 'success',
        'owned': [
            {'tx_id': c.tx_id, 'stealth_address': c.address_base58(), 'ephemeral_pub_key': c.ephemeral_pub_key}
            for c in owned
        ],
        'stats': stats.to_dict(),
    }), 200


@app.route('/api/stealth/spending-key', methods=['POST'])
def stealth_spending_key():
    """
    Receiver: derive spending key cho một stealth address
    Input: {stealth_address, ephemeral_pub_key, view_private_key, spend_public_key, output_index?}
    Output: {address, secret_key (base58, 64 bytes)}
    """
    try:
        data = get_payload()
        keypair = derive_stealth_spending_key(
            require(data, 'stealth_address'),
            require(data, 'ephemeral_pub_key'),
            as_key_bytes(require(data, 'view_private_key')),
            as_key_bytes(require(data, 'spend_public_key')),
            data.get('output_index', 0),
        )
    except StealthError as e:
        return error_response(e)

    with keypair:
        return jsonify({
            'status': 'success',
            'address': keypair.address,
            'secret_key': encode_base58(keypair.secret_key),
        }), 200


# ============== 4. Memo API ==============

@app.route('/api/memo/extract', methods=['POST'])
def memo_extract():
    """
    Input: {memo}
    Output: {ephemeral_pub_key | null}
    """
    try:
        data = get_payload()
    except StealthError as e:
        return error_response(e)

    return jsonify({
        'status': 'success',
        'ephemeral_pub_key': extract_ephemeral_key(data.get('memo')),
    }), 200


# ============== Health Check ==============

@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({
        'status': 'ok',
        'service': 'Stealth Address Service',
        'timestamp': datetime.now().isoformat()
    }), 200


# ============== Error Handlers ==============

@app.errorhandler(404)
def not_found(error):
    return jsonify({
        'status': 'error',
        'message': 'Endpoint not found'
    }), 404


@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify({
        'status': 'error',
        'message': 'Method not allowed'
    }), 405


@app.errorhandler(500)
def internal_error(error):
    logger.error("Internal error: %s", type(error).__name__)
    return jsonify({
        'status': 'error',
        'message': 'Internal server error'
    }), 500


if __name__ == '__main__':
    app.run(host=settings.api_host, port=settings.api_port, debug=settings.api_debug)
