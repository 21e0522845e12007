#!/usr/bin/env python
"""
Generate a sample image against the live ImagePig API.

Usage:
    IMAGEPIG_API_KEY=... python scripts/generate_sample.py [--model xl] [--output FILE] [--prompt TEXT]
"""

import argparse
import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from imagepig import ImagePig, ImagePigError, Model, set_verbosity


def main() -> None:
    """Generate a sample image."""
    parser = argparse.ArgumentParser(description="Generate a sample image")
    parser.add_argument(
        "--model",
        default="xl",
        choices=["default", "xl", "flux"],
        help="Model endpoint (default: xl)",
    )
    parser.add_argument(
        "--output",
        default="sample_output.jpeg",
        help="Output filename (default: sample_output.jpeg)",
    )
    parser.add_argument(
        "--prompt",
        default="cute piglet running on a green garden",
        help="Prompt for generation",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    args = parser.parse_args()
    set_verbosity(args.verbose)

    api_key = os.getenv("IMAGEPIG_API_KEY", "")
    if not api_key:
        print("❌ IMAGEPIG_API_KEY not set")
        sys.exit(1)

    print(f"Generating image with prompt: {args.prompt}")
    print()

    model = Model.DEFAULT if args.model == "default" else Model(args.model)
    try:
        result = ImagePig(api_key).generate(model, args.prompt)
        path = result.save(args.output)

        print("✓ Image generated successfully!")
        print(f"  - Saved to: {path}")
        print(f"  - Generation time: {result.generation_time:.2f}s")
        print(f"  - Model: {result.model_used}")
        if result.seed is not None:
            print(f"  - Seed: {result.seed}")

    except ImagePigError as e:
        print(f"❌ Generation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
