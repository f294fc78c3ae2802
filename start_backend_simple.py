#!/usr/bin/env python3
"""
Simple Backend Starter
Starts the Domo FastAPI backend with proper imports
"""

import uvicorn
import os
import sys

if __name__ == "__main__":
    # Run from the project root (where this script is located)
    script_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(script_dir)
    sys.path.insert(0, script_dir)

    print(f"Starting Domo API from: {script_dir}")
    print("API docs will be available at: http://localhost:8000/docs")

    uvicorn.run(
        "domo.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        reload_dirs=["./domo"],  # Only watch the package directory
    )
