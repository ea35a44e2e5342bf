"""
Repo-level runner:
- python run.py api            -> starts the FastAPI server (uvicorn)
- python run.py "your idea" .. -> runs the CLI (agentic_media.main)
"""
import sys

import uvicorn

from agentic_media.main import main as cli_main


def run_api(host: str = "127.0.0.1", port: int = 8000) -> int:
    print(f"Starting Agentic Media API at http://{host}:{port} ...")
    uvicorn.run("web_app.api:app", host=host, port=port, reload=True)
    return 0


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage:\n  python run.py api\n  python run.py \"a serene sunrise\" --type video")
        return 1
    if sys.argv[1].lower() == "api":
        return run_api()
    return cli_main(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
