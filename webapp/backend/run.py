"""Local launcher: starts the API and opens the interactive docs."""
import threading
import time
import webbrowser

import uvicorn

from surgery_scheduler.config import get_settings


def open_browser(url: str):
    time.sleep(2)  # Wait for server to start
    webbrowser.open(url)


if __name__ == "__main__":
    settings = get_settings()
    threading.Thread(target=open_browser, args=(f"http://localhost:{settings.port}/docs",), daemon=True).start()

    from main import app
    uvicorn.run(app, host=settings.host, port=settings.port, workers=1, log_level=settings.log_level.lower())
