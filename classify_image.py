#!/usr/bin/env python3
"""
SwachhSathi - Classify a Waste Photo
Runs the garbage classifier on one photo, or compares a before/after pair.

Usage:
    python classify_image.py <imageUri>
    python classify_image.py <beforeImageUri> <afterImageUri>
"""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from swachhsathi.context import create_context
from swachhsathi.core.exceptions import SwachhSathiError
from swachhsathi.core.logging import setup_logging


def print_classification(context, image_uri):
    print(f"\nClassifying: {image_uri}")
    result = context.classifier.classify(image_uri)

    print(f"\nResult ({result.analyzed_by.value} classifier):")
    print(f"  - Garbage:     {'yes' if result.is_garbage else 'no'}")
    if result.is_garbage:
        print(f"  - Category:    {result.category.value}")
        print(f"  - Severity:    {result.severity.value}")
        print(f"  - Confidence:  {result.confidence:.2f}")
        print(f"  - Objects:     {result.object_count}")
    print(f"  - Labels:      {', '.join(result.detected_labels) or '-'}")
    print(f"\n{result.description}")


def print_comparison(context, before_uri, after_uri):
    print(f"\nBefore: {before_uri}")
    print(f"After:  {after_uri}")
    result = context.comparator.compare(before_uri, after_uri)

    print(f"\nCleanliness score: {result.cleanliness_score}/100")
    print(f"  - Garbage before:  {result.before_garbage_count}")
    print(f"  - Garbage after:   {result.after_garbage_count}")
    print(f"  - Reduction:       {result.garbage_reduction}")
    print(f"  - Clean:           {'yes' if result.is_clean else 'no'}")
    print(f"\n{result.message}")


def main():
    args = sys.argv[1:]
    if len(args) not in (1, 2):
        print(__doc__)
        sys.exit(1)

    setup_logging(level="WARNING")

    print("=" * 60)
    print("SwachhSathi - Waste Photo Analysis")
    print("=" * 60)

    context = create_context()

    try:
        if len(args) == 1:
            print_classification(context, args[0])
        else:
            print_comparison(context, args[0], args[1])
    except SwachhSathiError as e:
        print(f"\nERROR: {e}")
        sys.exit(1)

    print("=" * 60)


if __name__ == "__main__":
    main()
