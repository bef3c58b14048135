"""Run the HTTP endpoint from project root. Use: python run_server.py"""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "career_match_ai.server:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8787")),
    )
