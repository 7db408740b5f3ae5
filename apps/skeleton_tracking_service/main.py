# Skeleton Tracking Service entry point
# Subscribes to an image topic, estimates body poses and optionally shows the rendered frames
import asyncio
import logging

from apps.skeleton_tracking_service.service import main

logger = logging.getLogger(__name__)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Skeleton tracking stopped")


if __name__ == "__main__":
    run()
