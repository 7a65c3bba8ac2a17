# backend/wsgi.py
"""
Entry point.

    FLASK_APP=wsgi.py python -m flask system init
    python wsgi.py            # HTTP API + Socket.IO on $PORT (default 3000)
"""
import os

from discpos import create_app
from discpos.extensions import socketio

app = create_app()


if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "3000")))
