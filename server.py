import logging
import threading
import webbrowser

import uvicorn

from smartmark.config import get_settings

logger = logging.getLogger("smartmark.server")


def open_browser_once(url: str):
    logger.info("Opening %s", url)
    try:
        webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning("Could not open a browser: %s", exc)


def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.open_browser:
        # give uvicorn a moment to bind before the browser asks for the page
        url = f"http://{settings.host}:{settings.port}/"
        threading.Timer(1.0, open_browser_once, args=(url,)).start()

    uvicorn.run(
        "smartmark.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
