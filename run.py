#!/usr/bin/env python3
"""
Main entry point for running the CineVault Flask application.
"""

from cinevault.app import create_app, init_db

app = create_app()

if __name__ == "__main__":
    # Initialize database tables on startup
    init_db(app)
    app.run(debug=True)
