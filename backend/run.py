import os

from mission_timer import create_app, socketio, start_sensor_bridge

app = create_app()

if __name__ == '__main__':
    # No reloader: it runs a second copy of this script, which would open a
    # second reader on the serial port and broadcast to nobody.
    start_sensor_bridge(app)
    socketio.run(app, host='0.0.0.0', port=int(os.environ.get('PORT', '5000')), debug=True,
                 use_reloader=False, allow_unsafe_werkzeug=True)
