from flask import Blueprint, jsonify

from mission_timer.services.interrupts import broadcast_interrupt

interrupts = Blueprint('interrupts', __name__)


@interrupts.route('/test-interrupt', methods=['POST'])
def test_interrupt():
    """Simulate a broken beam (+5s) without a sensor attached."""
    broadcast_interrupt(source='test')
    return jsonify({'ok': True})
