"""Local development entry point.

Usage:
    python run.py

Reads .env, then serves the API on $PORT (default 5000).
"""

import os

from dotenv import load_dotenv

load_dotenv()  # Load .env before anything else

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.debug, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
