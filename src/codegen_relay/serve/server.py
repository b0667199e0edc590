"""Run the FastAPI app under uvicorn."""
from __future__ import annotations
import argparse
import os

import uvicorn


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the /generate endpoint")
    ap.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    ap.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    args = ap.parse_args()

    uvicorn.run("codegen_relay.serve.fastapi_app:app", host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
