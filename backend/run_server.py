"""Server runner: configures logging and starts uvicorn."""
import logging
import signal
import sys

import uvicorn

from medinv.core.config import settings


def handle_signal(sig, frame):
    print(f"\nReceived signal {sig}, shutting down gracefully...")
    sys.exit(0)


signal.signal(signal.SIGINT, handle_signal)
signal.signal(signal.SIGTERM, handle_signal)

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("=" * 50)
    print(f"  Starting MedInv Backend ({settings.DEPLOYMENT_MODE} mode)")
    print("=" * 50)
    uvicorn.run(
        "medinv.main:app",
        host="127.0.0.1",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
    )
