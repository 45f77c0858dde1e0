"""
Web server launcher
Starts the backend API server.
"""

import argparse
import logging

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="CPU Scheduler Simulator - web server")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--reload', action='store_true', help="restart on code changes")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    print("=" * 60)
    print("  CPU Scheduler Simulator - Web Server")
    print("=" * 60)
    print()
    print(f"API docs: http://localhost:{args.port}/docs")
    print("Press Ctrl+C to stop.")
    print("-" * 60)

    uvicorn.run('web.backend.app:app', host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
