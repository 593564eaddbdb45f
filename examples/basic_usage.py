"""
Example: Basic Python API Usage

This example shows direct Python usage of AspectSession without the REST
API or CLI. Set API_KEY (or GEMINI_API_KEY) before running.

Usage:
    python examples/basic_usage.py photo.jpg
"""

import asyncio
import sys

from aspect_gen import AppStatus, AspectSession, ImageView
from aspect_gen.utils.uploads import image_size, load_image_file


def example_single_ratio(path: str):
    """Re-compose one image to 16:9 and download it."""
    print("=== Single Ratio ===\n")

    session = AspectSession()
    session.select_image(load_image_file(path))

    print("Generating 16:9 version...")
    asyncio.run(session.start_generation("16:9"))

    if session.state.status != AppStatus.SUCCESS:
        print(f"✗ {session.state.error_message}")
        return

    width, height = image_size(session.state.generated) or (0, 0)
    print(f"✓ Generated {width}x{height} image")
    print(f"  Saved to {session.download()}\n")


def example_compare_views(path: str):
    """Download both the original and the generated image."""
    print("=== Compare Original and Generated ===\n")

    session = AspectSession()
    session.subscribe(lambda state: print(f"  status: {state.status.value}"))
    session.select_image(load_image_file(path))
    session.select_ratio("1:1")
    asyncio.run(session.start_generation())

    for view in (ImageView.ORIGINAL, ImageView.GENERATED):
        if session.set_active_view(view):
            print(f"  {view.value}: {session.download()}")
    print()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    example_single_ratio(sys.argv[1])
    example_compare_views(sys.argv[1])
