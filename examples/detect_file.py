"""
Submit a file and a social media link, then list recent results.

    REALITY_DEFENDER_API_KEY=... python examples/detect_file.py photo.jpg [https://...]
"""

import logging
import sys
import threading

from dotenv import load_dotenv

# Load environment variables before the SDK builds its settings
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from realitydefender import GetResultsOptions, RealityDefender, RealityDefenderError  # noqa: E402


def main(file_path: str, link: str = None) -> int:
    with RealityDefender() as client:
        try:
            result = client.detect_file(file_path)
        except RealityDefenderError as e:
            logger.error(f"Detection failed [{e.kind.value}/{e.code}]: {e.message}")
            return 1

        logger.info(f"{file_path}: {result.status} (score={result.score})")
        for model in result.models:
            logger.info(f"  {model.name}: {model.status} ({model.confidence})")

        if link:
            upload = client.upload_social_media(link)
            done = threading.Event()

            def on_result(snapshot):
                logger.info(f"{link}: {snapshot.status}")
                done.set()

            def on_error(error):
                logger.error(f"{link}: {error!r}")
                done.set()

            client.poll_for_results(upload.request_id, 3, 120, on_result, on_error)
            done.wait()

        page = client.get_results(GetResultsOptions(size=5, max_attempts=10))
        logger.info(f"Page {page.current_page}/{page.total_pages}: {page.total_items} total")
        for item in page.items:
            logger.info(f"  {item.request_id}: {item.status}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(*sys.argv[1:3]))
