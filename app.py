"""
Entry point for the expense tracker Flask application.

Run with:
    python app.py

Or with a production WSGI server:
    gunicorn -w 1 app:application

Each worker process holds its own live snapshot, so the in-memory store
only makes sense with a single worker.
"""

from expense_tracker import create_app

application = create_app()

if __name__ == "__main__":
    application.run(host="0.0.0.0", port=5000, debug=False)
